"""View payload builders for the track catalog, dashboard, and certification screens."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .aggregator import (
    certificate_categories,
    is_certificate_eligible,
    order_for_dashboard,
    summarize_progress,
)
from .catalog import normalize_group_key
from .completion import completion_by_track, resolve_progress
from .config import CountingMode
from .gating import AuthContext, cta_label, evaluate_gate
from .models import CompletionStatus, Track, UserTrackProgress
from .tier_index import GroupTierIndex, build_tier_index

logger = logging.getLogger(__name__)


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class TrackCardPayload(_Payload):
    track_id: str
    locked: bool
    percent: int = Field(ge=0, le=100)
    completed: bool
    base_tier: bool = False
    prerequisite_label: str
    cta_label: str


class DashboardPayload(_Payload):
    completed_modules: int
    total_modules: int
    overall_percent: int = Field(ge=0, le=100)
    completed_tracks: int = 0
    xp_earned: int = 0
    badges_unlocked: int = 0
    tracks: List[TrackCardPayload] = Field(default_factory=list)


class CertificateEligibilityPayload(_Payload):
    category: str
    eligible: bool


@dataclass(frozen=True)
class _Snapshot:
    catalog: Sequence[Track]
    progress: Dict[str, UserTrackProgress]
    statuses: Dict[str, CompletionStatus]
    index: GroupTierIndex


def _snapshot(
    catalog: Iterable[Track],
    progress: Mapping[str, Any],
    counting_mode: Optional[CountingMode],
) -> _Snapshot:
    # Always rebuilt from the inputs; lock state is never carried between calls.
    tracks = list(catalog)
    resolved = resolve_progress(progress)
    statuses = completion_by_track(tracks, resolved, counting_mode=counting_mode)
    return _Snapshot(
        catalog=tracks,
        progress=resolved,
        statuses=statuses,
        index=build_tier_index(tracks, statuses),
    )


def _card(track: Track, snapshot: _Snapshot, auth: AuthContext) -> TrackCardPayload:
    status = snapshot.statuses[track.id]
    decision = evaluate_gate(track, snapshot.index, auth)
    return TrackCardPayload(
        track_id=track.id,
        locked=decision.locked,
        percent=status.percent,
        completed=status.completed,
        base_tier=decision.base_tier,
        prerequisite_label=decision.prerequisite_label,
        cta_label=cta_label(decision.locked, status),
    )


def build_catalog_view(
    catalog: Iterable[Track],
    progress: Mapping[str, Any],
    auth: AuthContext,
    *,
    counting_mode: Optional[CountingMode] = None,
) -> List[TrackCardPayload]:
    """Per-track lock state and completion, in catalog order.

    ``progress`` maps track ids to whatever the fetch layer produced; see
    ``resolve_progress`` for the accepted shapes.
    """
    snapshot = _snapshot(catalog, progress, counting_mode)
    return [_card(track, snapshot, auth) for track in snapshot.catalog]


def build_dashboard_view(
    catalog: Iterable[Track],
    progress: Mapping[str, Any],
    auth: AuthContext,
    *,
    counting_mode: Optional[CountingMode] = None,
) -> DashboardPayload:
    snapshot = _snapshot(catalog, progress, counting_mode)
    pairs = [(track, snapshot.statuses[track.id]) for track in snapshot.catalog]
    summary = summarize_progress(pairs, snapshot.progress, counting_mode=counting_mode)
    logger.debug(
        "Dashboard for user=%s: %d/%d modules, %d%% overall",
        auth.user_id,
        summary.completed_modules,
        summary.total_modules,
        summary.overall_percent,
    )
    return DashboardPayload(
        completed_modules=summary.completed_modules,
        total_modules=summary.total_modules,
        overall_percent=summary.overall_percent,
        completed_tracks=summary.completed_tracks,
        xp_earned=summary.xp_earned,
        badges_unlocked=summary.badges_unlocked,
        tracks=[_card(track, snapshot, auth) for track, _ in order_for_dashboard(pairs)],
    )


def build_certification_view(
    catalog: Iterable[Track],
    progress: Mapping[str, Any],
    categories: Optional[Iterable[str]] = None,
    *,
    counting_mode: Optional[CountingMode] = None,
) -> List[CertificateEligibilityPayload]:
    """Eligibility per category; defaults to every skill group in the catalog."""
    snapshot = _snapshot(catalog, progress, counting_mode)
    requested = list(categories) if categories is not None else certificate_categories(snapshot.catalog)
    return [
        CertificateEligibilityPayload(
            category=normalize_group_key(category),
            eligible=is_certificate_eligible(category, snapshot.index),
        )
        for category in requested
    ]


__all__ = [
    "CertificateEligibilityPayload",
    "DashboardPayload",
    "TrackCardPayload",
    "build_catalog_view",
    "build_certification_view",
    "build_dashboard_view",
]
