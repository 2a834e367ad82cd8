"""Tiered unlock rules: a track opens once its nearest lower tier in the same skill group is done."""

from __future__ import annotations

import logging
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict

from .catalog import group_key_of, group_label as default_group_label, normalize_difficulty
from .models import CompletionStatus, Difficulty, TierFlags, Track
from .tier_index import GroupTierIndex

logger = logging.getLogger(__name__)

BASE_LEVEL_LABEL = "Base level for this skill"
LOCKED_LABEL = "Locked"

_PREREQUISITE_LABELS = {
    "beginner": "Complete a Beginner track in {group} to unlock",
    "intermediate": "Complete an Intermediate track in {group} to unlock",
}


class AuthContext(BaseModel):
    """Identity signal passed in by the caller; nothing is read from ambient state."""

    model_config = ConfigDict(frozen=True)

    is_authenticated: bool = False
    user_id: Optional[str] = None

    @classmethod
    def anonymous(cls) -> "AuthContext":
        return cls()

    @classmethod
    def for_user(cls, user_id: str) -> "AuthContext":
        return cls(is_authenticated=True, user_id=user_id)


class GateDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    track_id: str
    locked: bool
    base_tier: bool
    prerequisite: Optional[Difficulty] = None
    prerequisite_label: str


def _tier_of(track: Union[Track, str, None]) -> Optional[Difficulty]:
    if isinstance(track, Track):
        return normalize_difficulty(track.difficulty)
    return normalize_difficulty(track)


def nearest_lower_present(tier: Optional[str], present: TierFlags) -> Optional[Difficulty]:
    """Closest existing tier below ``tier`` in the group, if any."""
    if tier == "advanced":
        if present.intermediate:
            return "intermediate"
        if present.beginner:
            return "beginner"
        return None
    if tier == "intermediate":
        return "beginner" if present.beginner else None
    return None


def is_base_tier(track: Track, present: TierFlags) -> bool:
    """True when the track sits on the lowest tier present in its group."""
    tier = _tier_of(track)
    if tier == "beginner":
        return True
    if tier == "intermediate":
        return not present.beginner
    if tier == "advanced":
        return not present.beginner and not present.intermediate
    return False


def is_locked(track: Track, present: TierFlags, completed: TierFlags, is_authenticated: bool) -> bool:
    """Decide whether ``track`` is locked for the current learner.

    ``present`` and ``completed`` are the tier flags of the track's own skill
    group. Unranked and ungrouped tracks are never locked; neither is the base
    tier. Anything above the base tier is locked for anonymous callers because
    completion cannot be verified, and otherwise stays locked until the nearest
    lower tier that exists in the group has been completed.
    """
    tier = _tier_of(track)
    if tier is None or not group_key_of(track):
        return False
    if is_base_tier(track, present):
        return False
    if not is_authenticated:
        return True
    prerequisite = nearest_lower_present(tier, present)
    if prerequisite is None:
        return False
    return not completed.has(prerequisite)


def prerequisite_label(track: Track, present: TierFlags, group_label: Optional[str] = None) -> str:
    prerequisite = nearest_lower_present(_tier_of(track), present)
    if prerequisite is None:
        return BASE_LEVEL_LABEL
    label = group_label or default_group_label(track)
    return _PREREQUISITE_LABELS[prerequisite].format(group=label)


def cta_label(locked: bool, status: Optional[CompletionStatus]) -> str:
    """Call-to-action text for a track card."""
    if locked:
        return LOCKED_LABEL
    if status is not None and status.completed:
        return "Review Track"
    if status is not None and status.percent > 0:
        return "Continue Learning"
    return "Start Learning"


def evaluate_gate(track: Track, index: GroupTierIndex, auth: AuthContext) -> GateDecision:
    group = index.group_of(track)
    present = index.present_for(group)
    completed = index.completed_for(group)
    locked = is_locked(track, present, completed, auth.is_authenticated)
    if locked:
        logger.debug("Track %s locked for group %r (authenticated=%s)", track.id, group, auth.is_authenticated)
    return GateDecision(
        track_id=track.id,
        locked=locked,
        base_tier=is_base_tier(track, present),
        prerequisite=nearest_lower_present(_tier_of(track), present),
        prerequisite_label=prerequisite_label(track, present),
    )


__all__ = [
    "AuthContext",
    "BASE_LEVEL_LABEL",
    "GateDecision",
    "LOCKED_LABEL",
    "cta_label",
    "evaluate_gate",
    "is_base_tier",
    "is_locked",
    "nearest_lower_present",
    "prerequisite_label",
]
