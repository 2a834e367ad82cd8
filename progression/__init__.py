"""Adaptive progression and prerequisite gating for curriculum tracks."""

from .aggregator import ProgressionSummary, is_certificate_eligible, summarize_progress
from .catalog import group_key_of, normalize_difficulty
from .completion import completion_of, resolve_progress
from .gating import AuthContext, GateDecision, evaluate_gate, is_locked, prerequisite_label
from .models import CompletionStatus, Game, Module, TierFlags, Track, UserTrackProgress, parse_catalog
from .tier_index import GroupTierIndex, build_tier_index
from .views import build_catalog_view, build_certification_view, build_dashboard_view

__all__ = [
    "AuthContext",
    "CompletionStatus",
    "Game",
    "GateDecision",
    "GroupTierIndex",
    "Module",
    "ProgressionSummary",
    "TierFlags",
    "Track",
    "UserTrackProgress",
    "build_catalog_view",
    "build_certification_view",
    "build_dashboard_view",
    "build_tier_index",
    "completion_of",
    "evaluate_gate",
    "group_key_of",
    "is_certificate_eligible",
    "is_locked",
    "normalize_difficulty",
    "parse_catalog",
    "prerequisite_label",
    "resolve_progress",
    "summarize_progress",
]
