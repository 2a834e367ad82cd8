"""Cross-track progress rollups for dashboards and certificate eligibility."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .catalog import group_key_of, normalize_group_key
from .completion import distinct_game_ids, round_half_up
from .config import CountingMode, get_settings
from .models import CompletionStatus, Track, UserTrackProgress
from .telemetry import emit_event
from .tier_index import GroupTierIndex

XP_PER_MODULE = 100
MODULES_PER_BADGE = 5

TrackStatusPair = Tuple[Track, CompletionStatus]


class ProgressionSummary(BaseModel):
    """Dashboard rollup for one learner."""

    model_config = ConfigDict(frozen=True)

    total_modules: int = Field(default=0, ge=0)
    completed_modules: int = Field(default=0, ge=0)
    total_items: int = Field(default=0, ge=0)
    items_done: int = Field(default=0, ge=0)
    overall_percent: int = Field(default=100, ge=0, le=100)
    completed_tracks: int = Field(default=0, ge=0)
    xp_earned: int = Field(default=0, ge=0)
    badges_unlocked: int = Field(default=0, ge=0)


def summarize_progress(
    pairs: Iterable[TrackStatusPair],
    progress_by_track: Mapping[str, UserTrackProgress],
    *,
    counting_mode: Optional[CountingMode] = None,
) -> ProgressionSummary:
    """Roll per-track completion up into dashboard totals.

    Item counts use the same clamped tally as ``completion_by_track`` under the
    same counting mode, so the overall percent agrees with the per-track
    statuses. Tracks missing from ``progress_by_track`` count as untouched.
    """
    modules_only = (counting_mode or get_settings().counting_mode) == "modules_only"
    total_modules = 0
    completed_modules = 0
    total_items = 0
    items_done = 0
    completed_tracks = 0

    for track, status in pairs:
        progress = progress_by_track.get(track.id) or UserTrackProgress.empty()
        module_count = len(track.modules)
        game_count = 0 if modules_only else len(distinct_game_ids(track))
        modules_done = min(module_count, len(progress.completed_module_ids))
        games_done = min(game_count, len(progress.completed_game_ids))

        total_modules += module_count
        completed_modules += modules_done
        total_items += module_count + game_count
        items_done += modules_done + games_done
        if status.completed:
            completed_tracks += 1

    overall = round_half_up(items_done / total_items * 100) if total_items else 100
    return ProgressionSummary(
        total_modules=total_modules,
        completed_modules=completed_modules,
        total_items=total_items,
        items_done=items_done,
        overall_percent=min(100, overall),
        completed_tracks=completed_tracks,
        xp_earned=completed_modules * XP_PER_MODULE,
        badges_unlocked=completed_modules // MODULES_PER_BADGE,
    )


def is_certificate_eligible(category: str, index: GroupTierIndex) -> bool:
    """True iff the learner completed the highest tier that exists for ``category``.

    Issuing the certificate is left to the external certificate service.
    """
    group = normalize_group_key(category)
    highest = index.highest_tier(group) if group else None
    eligible = highest is not None and index.completed_for(group).has(highest)
    emit_event(
        "certificate_eligibility_evaluated",
        category=group,
        highest_tier=highest,
        eligible=eligible,
    )
    return eligible


def certificate_categories(catalog: Iterable[Track]) -> List[str]:
    """Every non-empty skill group, in catalog order."""
    seen: Dict[str, None] = {}
    for track in catalog:
        key = group_key_of(track)
        if key:
            seen.setdefault(key, None)
    return list(seen)


def _dashboard_rank(status: CompletionStatus) -> Tuple[int, int]:
    if 0 < status.percent < 100:
        return (0, -status.percent)
    if status.percent == 0:
        return (1, 0)
    return (2, 0)


def order_for_dashboard(pairs: Sequence[TrackStatusPair]) -> List[TrackStatusPair]:
    """In-progress tracks first (furthest along first), then untouched, then completed."""
    return sorted(pairs, key=lambda pair: _dashboard_rank(pair[1]))


__all__ = [
    "MODULES_PER_BADGE",
    "ProgressionSummary",
    "XP_PER_MODULE",
    "certificate_categories",
    "is_certificate_eligible",
    "order_for_dashboard",
    "summarize_progress",
]
