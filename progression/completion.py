"""Percent-complete computation for a learner on a single track."""

from __future__ import annotations

import logging
import math
import warnings
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from .config import CountingMode, get_settings
from .models import CompletionStatus, Track, UserTrackProgress
from .telemetry import emit_event

logger = logging.getLogger(__name__)


def distinct_game_ids(track: Track) -> List[str]:
    """Game ids reachable from the track, first occurrence wins."""
    seen: Dict[str, None] = {}
    for module in track.modules:
        for game in module.games:
            seen.setdefault(game.id, None)
    for game in track.games:
        seen.setdefault(game.id, None)
    return list(seen)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _status(done: int, total: int) -> CompletionStatus:
    if total <= 0:
        return CompletionStatus(percent=100, completed=True)
    percent = max(0, min(100, round_half_up(done / total * 100)))
    return CompletionStatus(percent=percent, completed=percent >= 100)


def completion_of(track: Track, progress: Optional[UserTrackProgress]) -> CompletionStatus:
    """Compute percent complete over modules plus distinct games.

    Completed counts are clamped to the catalog's current size so a record
    that still lists a since-removed module never pushes past 100%. A track
    without any modules or games is vacuously complete.
    """
    progress = progress or UserTrackProgress.empty()
    module_count = len(track.modules)
    game_count = len(distinct_game_ids(track))
    done = min(module_count, len(progress.completed_module_ids)) + min(
        game_count, len(progress.completed_game_ids)
    )
    return _status(done, module_count + game_count)


def _module_only_status(track: Track, progress: Optional[UserTrackProgress]) -> CompletionStatus:
    progress = progress or UserTrackProgress.empty()
    module_count = len(track.modules)
    return _status(min(module_count, len(progress.completed_module_ids)), module_count)


def module_only_completion_of(track: Track, progress: Optional[UserTrackProgress]) -> CompletionStatus:
    """Legacy module-only percent; diverges from ``completion_of`` once a module holds more or fewer than one game."""
    warnings.warn(
        "module_only_completion_of is deprecated; use completion_of",
        DeprecationWarning,
        stacklevel=2,
    )
    emit_event("legacy_completion_formula_used", track_id=track.id)
    return _module_only_status(track, progress)


def _defaulted(track_id: str, reason: str) -> UserTrackProgress:
    logger.warning("Progress for track %s unavailable (%s); defaulting to empty progress.", track_id, reason)
    emit_event("progress_fetch_defaulted", track_id=track_id, reason=reason)
    return UserTrackProgress.empty()


def _coerce_progress(track_id: str, outcome: Any) -> UserTrackProgress:
    if outcome is None:
        return UserTrackProgress.empty()
    if isinstance(outcome, UserTrackProgress):
        return outcome
    if isinstance(outcome, BaseException):
        return _defaulted(track_id, f"{type(outcome).__name__}: {outcome}")
    if isinstance(outcome, Mapping):
        record = outcome["progress"] if "progress" in outcome else outcome
        if record is None:
            return UserTrackProgress.empty()
        try:
            return UserTrackProgress.model_validate(record)
        except ValidationError as exc:
            return _defaulted(track_id, f"invalid payload: {exc.error_count()} error(s)")
    return _defaulted(track_id, f"unsupported payload type {type(outcome).__name__}")


def resolve_progress(fetched: Mapping[str, Any]) -> Dict[str, UserTrackProgress]:
    """Turn per-track fetch outcomes into progress records.

    Each value may be a ``UserTrackProgress``, a JSON dict (optionally wrapped
    in ``{"progress": ...}``), ``None`` when no record exists yet, or the
    exception a failed fetch produced. Failures only affect their own track.
    """
    return {str(track_id): _coerce_progress(str(track_id), outcome) for track_id, outcome in fetched.items()}


def completion_by_track(
    catalog: Iterable[Track],
    progress_by_track: Mapping[str, UserTrackProgress],
    *,
    counting_mode: Optional[CountingMode] = None,
) -> Dict[str, CompletionStatus]:
    mode = counting_mode or get_settings().counting_mode
    if mode == "modules_only":
        logger.warning("Computing completion with the deprecated modules-only formula.")
        calculate = _module_only_status
    else:
        calculate = completion_of
    return {track.id: calculate(track, progress_by_track.get(track.id)) for track in catalog}


__all__ = [
    "completion_by_track",
    "completion_of",
    "distinct_game_ids",
    "module_only_completion_of",
    "resolve_progress",
    "round_half_up",
]
