"""Unit tests for RecommendationEngine.compute_recommendations."""

import asyncio

import pytest

from recommender.models.item import Item
from recommender.models.profile import PreferenceProfile
from recommender.services.recommendation.engine import RecommendationEngine


def _compute(catalog, profile, **kwargs):
    return asyncio.run(RecommendationEngine(catalog).compute_recommendations(profile, **kwargs))


class TestComputeRecommendations:
    def test_scenario_ranking(self, scenario_catalog, scenario_profile):
        result = _compute(scenario_catalog, scenario_profile, limit=6)

        assert [(s.item.id, s.score) for s in result] == [("P2", 22), ("P4", 3), ("P3", 2)]

    def test_default_limit_is_six(self, make_catalog, scenario_profile):
        catalog = make_catalog(by_tag={"healing": [{"id": f"N{i}", "tags": ["healing"]} for i in range(10)]})

        result = _compute(catalog, scenario_profile)

        assert len(result) == 6
        assert [s.item.id for s in result] == [f"N{i}" for i in range(6)]

    def test_empty_profile_makes_no_calls(self, scenario_catalog):
        assert _compute(scenario_catalog, PreferenceProfile()) == []
        assert scenario_catalog.calls == []

    def test_idempotent(self, scenario_catalog, scenario_profile):
        first = _compute(scenario_catalog, scenario_profile)
        second = _compute(scenario_catalog, scenario_profile)

        assert first == second

    @pytest.mark.parametrize("limit", [1, 2, 3, 10])
    def test_length_bounded_and_monotonic(self, scenario_catalog, scenario_profile, limit):
        result = _compute(scenario_catalog, scenario_profile, limit=limit)

        assert len(result) <= limit
        scores = [s.score for s in result]
        assert scores == sorted(scores, reverse=True)
        assert len({s.item.id for s in result}) == len(result)

    def test_excludes_favorites_current_and_explicit(self, scenario_catalog):
        scenario_catalog.by_tag["healing"].append({"id": "P1", "tags": ["healing"]})
        profile = PreferenceProfile(favorite_tags=["healing"], favorite_items=[Item(id="P1", tags=["daily"])])

        result = _compute(scenario_catalog, profile, current_item_id="P3", exclude_ids={"P4"})

        assert [s.item.id for s in result] == ["P2"]

    def test_catalog_outage_returns_empty_list(self, scenario_catalog, scenario_profile):
        scenario_catalog.failing = {"healing", "daily", "A"}

        assert _compute(scenario_catalog, scenario_profile) == []

    def test_unexpected_failure_is_not_raised(self, scenario_profile):
        class BrokenPlanner:
            def plan(self, profile):
                raise RuntimeError("boom")

        engine = RecommendationEngine(gateway=None, planner=BrokenPlanner())

        assert asyncio.run(engine.compute_recommendations(scenario_profile)) == []
