"""End-to-end tests for the catalog, dashboard, and certification payloads."""

from __future__ import annotations

from typing import Any, Dict, List

import pytest

from progression.gating import AuthContext
from progression.models import Track, parse_catalog
from progression.views import build_catalog_view, build_certification_view, build_dashboard_view


CATALOG_JSON: List[Dict[str, Any]] = [
    {
        "id": "py-b",
        "title": "Python for Beginners",
        "difficulty": "Beginner",
        "modules": [
            {"id": "py-b-m1", "type": "lesson", "games": [{"id": "py-b-g1", "type": "quiz"}]},
            {"id": "py-b-m2", "type": "lesson", "games": None},
        ],
    },
    {
        "id": "py-i",
        "title": "Intermediate Python",
        "difficulty": "intermediate",
        "modules": [
            {"id": "py-i-m1", "type": "lesson"},
            {"id": "py-i-m2", "type": "lesson"},
            {"id": "py-i-m3", "type": "lesson"},
        ],
    },
    {
        "id": "py-a",
        "title": "Python - Advanced",
        "difficulty": "advanced",
        "modules": [{"id": "py-a-m1", "type": "lesson"}],
    },
    {
        "id": "sec-b",
        "category": "",
        "title": "Cybersecurity Essentials for Beginners",
        "difficulty": "beginner",
        "modules": [],
    },
]


@pytest.fixture
def catalog() -> List[Track]:
    return parse_catalog(CATALOG_JSON)


def _by_id(cards):
    return {card.track_id: card for card in cards}


def test_completing_beginner_unlocks_intermediate(catalog: List[Track]) -> None:
    progress = {"py-b": {"progress": {"completedModules": ["py-b-m1", "py-b-m2"], "completedGames": ["py-b-g1"]}}}

    cards = _by_id(build_catalog_view(catalog, progress, AuthContext.for_user("learner-1")))

    assert cards["py-b"].percent == 100
    assert cards["py-b"].completed is True
    assert cards["py-b"].cta_label == "Review Track"
    assert cards["py-i"].locked is False
    assert cards["py-i"].cta_label == "Start Learning"
    assert cards["py-a"].locked is True
    assert cards["py-a"].prerequisite_label == "Complete an Intermediate track in python to unlock"


def test_partial_beginner_keeps_intermediate_locked(catalog: List[Track]) -> None:
    progress = {"py-b": {"completedModules": ["py-b-m1"], "completedGames": []}}

    cards = _by_id(build_catalog_view(catalog, progress, AuthContext.for_user("learner-1")))

    assert cards["py-b"].percent == 33
    assert cards["py-b"].cta_label == "Continue Learning"
    assert cards["py-i"].locked is True


def test_anonymous_visitor_sees_upper_tiers_locked(catalog: List[Track]) -> None:
    cards = _by_id(build_catalog_view(catalog, {}, AuthContext.anonymous()))

    assert cards["py-b"].locked is False
    assert cards["py-b"].base_tier is True
    assert cards["py-i"].locked is True
    assert cards["py-a"].locked is True
    assert cards["sec-b"].locked is False


def test_empty_track_is_complete_immediately(catalog: List[Track]) -> None:
    cards = _by_id(build_catalog_view(catalog, {}, AuthContext.for_user("learner-2")))
    assert cards["sec-b"].percent == 100
    assert cards["sec-b"].completed is True


def test_failed_fetch_only_affects_its_track(catalog: List[Track]) -> None:
    progress = {
        "py-b": {"completedModules": ["py-b-m1", "py-b-m2"], "completedGames": ["py-b-g1"]},
        "py-i": TimeoutError("progress service timed out"),
    }

    cards = _by_id(build_catalog_view(catalog, progress, AuthContext.for_user("learner-3")))

    assert cards["py-b"].completed is True
    assert cards["py-i"].percent == 0
    assert cards["py-i"].locked is False
    assert cards["py-a"].locked is True


def test_catalog_view_serialises_with_camel_case(catalog: List[Track]) -> None:
    card = build_catalog_view(catalog, {}, AuthContext.anonymous())[0]
    payload = card.model_dump(by_alias=True)
    assert payload["trackId"] == "py-b"
    assert set(payload) >= {"locked", "percent", "completed", "baseTier", "prerequisiteLabel", "ctaLabel"}


def test_dashboard_rolls_up_and_orders_tracks(catalog: List[Track]) -> None:
    progress = {
        "py-b": {"completedModules": ["py-b-m1", "py-b-m2"], "completedGames": ["py-b-g1"]},
        "py-i": {"completedModules": ["py-i-m1"]},
    }

    dashboard = build_dashboard_view(catalog, progress, AuthContext.for_user("learner-4"))

    assert dashboard.total_modules == 6
    assert dashboard.completed_modules == 3
    assert dashboard.overall_percent == 57
    assert dashboard.completed_tracks == 2
    assert [card.track_id for card in dashboard.tracks] == ["py-i", "py-a", "py-b", "sec-b"]
    dumped = dashboard.model_dump(by_alias=True)
    assert {"completedModules", "totalModules", "overallPercent"} <= set(dumped)


def test_dashboard_overall_percent_matches_modules_only_cards() -> None:
    catalog = parse_catalog(
        [
            {
                "id": "games-heavy",
                "title": "Game Design for Beginners",
                "difficulty": "beginner",
                "modules": [{"id": "gd-m1", "games": [{"id": "gd-g1"}, {"id": "gd-g2"}]}],
            }
        ]
    )
    progress = {"games-heavy": {"completedModules": ["gd-m1"]}}

    dashboard = build_dashboard_view(
        catalog, progress, AuthContext.for_user("learner-5"), counting_mode="modules_only"
    )

    assert dashboard.tracks[0].percent == 100
    assert dashboard.completed_tracks == 1
    assert dashboard.overall_percent == 100


def test_certification_view_defaults_to_catalog_groups(catalog: List[Track]) -> None:
    progress = {
        "py-a": {"completedModules": ["py-a-m1"]},
    }

    view = {entry.category: entry.eligible for entry in build_certification_view(catalog, progress)}

    assert view == {"python": True, "cybersecurity essentials": True}


def test_certification_view_for_requested_categories(catalog: List[Track]) -> None:
    view = build_certification_view(catalog, {}, ["Python", "Rust"])
    assert [(entry.category, entry.eligible) for entry in view] == [("python", False), ("rust", False)]


def test_parse_catalog_accepts_envelope_and_rejects_other_shapes() -> None:
    tracks = parse_catalog({"tracks": [{"id": 7, "title": "SQL for Beginners", "difficulty": "beginner"}]})
    assert tracks[0].id == "7"
    with pytest.raises(TypeError):
        parse_catalog(42)
