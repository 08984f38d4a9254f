from collections import defaultdict

from recommender.core.config import settings
from recommender.core.constants import FAVORITE_TAG_WEIGHT, ITEM_SIGNAL_WEIGHT
from recommender.models.profile import PreferenceProfile
from recommender.models.recommendation import QueryPlan, TermWeights


def top_terms(weights: dict[str, int], limit: int) -> list[str]:
    """Highest weights first; equal weights keep first-insertion order (sort is stable)."""
    if limit <= 0:
        return []
    ranked = sorted(weights.items(), key=lambda x: x[1], reverse=True)
    return [term for term, _ in ranked[:limit]]


class QueryPlanner:
    """
    Turns a preference profile into a handful of high-signal catalog queries.
    """

    def __init__(self, tag_terms: int | None = None, cast_terms: int | None = None):
        self.tag_terms = settings.RECOMMENDATION_TAG_TERMS if tag_terms is None else tag_terms
        self.cast_terms = settings.RECOMMENDATION_CAST_TERMS if cast_terms is None else cast_terms

    def build_weights(self, profile: PreferenceProfile) -> TermWeights:
        # defaultdict keeps the order in which a key first received weight
        tag_weight: dict[str, int] = defaultdict(int)
        cast_weight: dict[str, int] = defaultdict(int)

        for tag in profile.favorite_tags:
            tag_weight[tag] += FAVORITE_TAG_WEIGHT

        for item in profile.favorite_items:
            for tag in item.tags:
                tag_weight[tag] += ITEM_SIGNAL_WEIGHT
            for actor in item.cast:
                cast_weight[actor] += ITEM_SIGNAL_WEIGHT

        return TermWeights(tag_weight=dict(tag_weight), cast_weight=dict(cast_weight))

    def plan(self, profile: PreferenceProfile) -> QueryPlan:
        if not profile.has_signals():
            return QueryPlan()

        weights = self.build_weights(profile)
        return QueryPlan(
            tag_terms=top_terms(weights.tag_weight, self.tag_terms),
            cast_terms=top_terms(weights.cast_weight, self.cast_terms),
            weights=weights,
            favorite_tags=frozenset(profile.favorite_tags),
        )
