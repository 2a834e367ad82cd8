"""Per-skill-group lookup of which tiers exist and which the learner has completed."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional

from .catalog import group_key_of, normalize_difficulty
from .models import CompletionStatus, Difficulty, TierFlags, Track

logger = logging.getLogger(__name__)

_NO_TIERS = TierFlags()


@dataclass(frozen=True)
class GroupTierIndex:
    """Read-only snapshot built from one catalog and one learner's statuses.

    Never update an index after progress changes; build a new one.
    """

    present: Mapping[str, TierFlags]
    completed: Mapping[str, TierFlags]

    def present_for(self, group: str) -> TierFlags:
        return self.present.get(group, _NO_TIERS)

    def completed_for(self, group: str) -> TierFlags:
        return self.completed.get(group, _NO_TIERS)

    def group_of(self, track: Track) -> str:
        return group_key_of(track)

    def base_tier(self, group: str) -> Optional[Difficulty]:
        tiers = self.present_for(group).tiers()
        return tiers[0] if tiers else None

    def highest_tier(self, group: str) -> Optional[Difficulty]:
        tiers = self.present_for(group).tiers()
        return tiers[-1] if tiers else None

    def groups(self) -> List[str]:
        return list(self.present)


def build_tier_index(catalog: Iterable[Track], statuses: Mapping[str, CompletionStatus]) -> GroupTierIndex:
    """Derive fresh tier tables from the current catalog and completion statuses.

    Tracks with an empty group key are left out so they never gate or get
    gated. Unranked difficulties register their group without setting a tier.
    """
    present: Dict[str, TierFlags] = {}
    completed: Dict[str, TierFlags] = {}

    for track in catalog:
        key = group_key_of(track)
        if not key:
            continue
        tier = normalize_difficulty(track.difficulty)
        present[key] = present.get(key, _NO_TIERS).with_tier(tier)
        status = statuses.get(track.id)
        if status is not None and status.completed:
            completed[key] = completed.get(key, _NO_TIERS).with_tier(tier)

    logger.debug(
        "Built tier index for %d groups (%d with completions)",
        len(present),
        len(completed),
    )
    return GroupTierIndex(
        present=MappingProxyType(present),
        completed=MappingProxyType(completed),
    )


__all__ = ["GroupTierIndex", "build_tier_index"]
