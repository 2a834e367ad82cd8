"""Track, progress, and derived-status records consumed by the engine."""

from __future__ import annotations

import json
from typing import Any, FrozenSet, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator


Difficulty = Literal["beginner", "intermediate", "advanced"]
TIERS: Tuple[Difficulty, ...] = ("beginner", "intermediate", "advanced")


def _as_str(value: Any) -> Any:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _as_sequence(value: Any) -> Any:
    return () if value is None else value


class Game(BaseModel):
    """Interactive exercise attached to a module or directly to a track."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    type: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return _as_str(value)


class Module(BaseModel):
    """Content block within a track; one completable unit."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    type: Optional[str] = None
    games: Tuple[Game, ...] = ()

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return _as_str(value)

    @field_validator("games", mode="before")
    @classmethod
    def _coerce_games(cls, value: Any) -> Any:
        return _as_sequence(value)


class Track(BaseModel):
    """Curriculum unit at one difficulty tier, as served by the catalog API."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    title: str = ""
    description: str = ""
    category: Optional[str] = None
    skill: Optional[str] = None
    topic: Optional[str] = None
    language: Optional[str] = None
    difficulty: Optional[str] = None
    modules: Tuple[Module, ...] = ()
    games: Tuple[Game, ...] = ()

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        return _as_str(value)

    @field_validator("modules", "games", mode="before")
    @classmethod
    def _coerce_sequences(cls, value: Any) -> Any:
        return _as_sequence(value)

    @field_validator("title", "description", mode="before")
    @classmethod
    def _blank_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("difficulty", mode="before")
    @classmethod
    def _stringify_difficulty(cls, value: Any) -> Any:
        # Anything that is not text ends up unranked rather than failing validation.
        return value if value is None or isinstance(value, str) else None


class UserTrackProgress(BaseModel):
    """Completed module and game ids for one (user, track) pair."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    completed_module_ids: FrozenSet[str] = Field(default_factory=frozenset, alias="completedModules")
    completed_game_ids: FrozenSet[str] = Field(default_factory=frozenset, alias="completedGames")

    @field_validator("completed_module_ids", "completed_game_ids", mode="before")
    @classmethod
    def _normalise_ids(cls, value: Any) -> Any:
        if value is None:
            return frozenset()
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(item) for item in value if item is not None and str(item).strip())
        return value

    @classmethod
    def empty(cls) -> "UserTrackProgress":
        return cls()

    def merge(self, other: Optional["UserTrackProgress"]) -> "UserTrackProgress":
        """Union two snapshots of the same record, e.g. an optimistic update and the server copy."""
        if other is None:
            return self
        return UserTrackProgress(
            completed_module_ids=self.completed_module_ids | other.completed_module_ids,
            completed_game_ids=self.completed_game_ids | other.completed_game_ids,
        )


class CompletionStatus(BaseModel):
    """Derived completion for one (user, track); never stored."""

    model_config = ConfigDict(frozen=True)

    percent: int = Field(ge=0, le=100)
    completed: bool


class TierFlags(BaseModel):
    """Which of the three ranked tiers are set for one skill group."""

    model_config = ConfigDict(frozen=True)

    beginner: bool = False
    intermediate: bool = False
    advanced: bool = False

    def has(self, tier: Optional[str]) -> bool:
        if tier not in TIERS:
            return False
        return bool(getattr(self, tier))

    def with_tier(self, tier: Optional[str]) -> "TierFlags":
        if tier not in TIERS:
            return self
        return self.model_copy(update={tier: True})

    def tiers(self) -> List[Difficulty]:
        return [tier for tier in TIERS if self.has(tier)]


def parse_catalog(payload: Any) -> List[Track]:
    """Validate a catalog response: a list of tracks or a ``{"tracks": [...]}`` envelope."""
    if isinstance(payload, str):
        payload = json.loads(payload)
    if isinstance(payload, dict) and "tracks" in payload:
        payload = payload["tracks"]
    if not isinstance(payload, list):
        raise TypeError(f"Unsupported catalog payload type: {type(payload).__name__}")
    return [entry if isinstance(entry, Track) else Track.model_validate(entry) for entry in payload]


__all__ = [
    "CompletionStatus",
    "Difficulty",
    "Game",
    "Module",
    "TIERS",
    "TierFlags",
    "Track",
    "UserTrackProgress",
    "parse_catalog",
]
