"""Skill-group derivation and difficulty normalisation for catalog tracks."""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

from .config import get_settings
from .models import TIERS, Difficulty, Track

TIER_RANK: Dict[Difficulty, int] = {tier: rank for rank, tier in enumerate(TIERS)}

_GROUP_FIELDS = ("category", "skill", "topic", "language")

_TIER_SUFFIX = re.compile(r"\s*[-–—|:]+\s*(beginners?|intermediate|advanced)\s*$", re.IGNORECASE)
_TIER_PHRASES = (
    re.compile(r"\bfor\s+beginners\b", re.IGNORECASE),
    re.compile(r"\bbeginners?\b", re.IGNORECASE),
    re.compile(r"\bintermediate\b", re.IGNORECASE),
    re.compile(r"\badvanced\b", re.IGNORECASE),
)
_FOR_WORD = re.compile(r"\bfor\b", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_difficulty(value: Any) -> Optional[Difficulty]:
    """Return the ranked tier for ``value`` or ``None`` when it is unranked."""
    if not isinstance(value, str):
        return None
    candidate = value.strip().lower()
    for tier in TIERS:
        if candidate == tier:
            return tier
    return None


def tier_rank(value: Any) -> Optional[int]:
    tier = normalize_difficulty(value)
    return TIER_RANK[tier] if tier is not None else None


def _explicit_group(track: Track) -> str:
    for field in _GROUP_FIELDS:
        raw = getattr(track, field, None)
        if raw is None:
            continue
        text = str(raw).strip()
        if text:
            return text
    return ""


def _core_title(title: str) -> str:
    core = _TIER_SUFFIX.sub("", title)
    for pattern in _TIER_PHRASES:
        core = pattern.sub("", core)
    match = _FOR_WORD.search(core)
    if match:
        # "C++ Programming for Data Science" groups with "C++ Programming".
        core = core[: match.start()]
    return _WHITESPACE.sub(" ", core).strip()


def group_key_of(track: Track) -> str:
    """Derive the skill-group key shared by tracks covering the same subject.

    An explicit ``category`` (then ``skill``, ``topic``, ``language``) wins.
    Otherwise the title is stripped of difficulty wording, cut at the first
    standalone "for", and lower-cased. An empty title yields ``""``, which
    isolates the track from every group.
    """
    explicit = _explicit_group(track)
    if explicit:
        return explicit.lower()
    title = (track.title or "").strip()
    if not title:
        return ""
    return _core_title(title).lower()


def normalize_group_key(value: Optional[str]) -> str:
    """Normalise a caller-supplied category so it can be looked up as a group key."""
    return (value or "").strip().lower()


def group_label(track: Track) -> str:
    """Human-facing name of the track's group for prerequisite messaging."""
    return group_key_of(track) or get_settings().ungrouped_label


__all__ = [
    "TIER_RANK",
    "group_key_of",
    "group_label",
    "normalize_difficulty",
    "normalize_group_key",
    "tier_rank",
]
