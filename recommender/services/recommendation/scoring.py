from recommender.core.constants import CAST_MATCH_MULTIPLIER, FAVORITE_TAG_MATCH_BONUS, TAG_MATCH_MULTIPLIER
from recommender.models.item import Item
from recommender.models.recommendation import QueryPlan


class RecommendationScoring:
    """
    Weighted term overlap between a candidate and the profile's term weights.

    Weights are additive and unbounded; no normalization or decay.
    """

    @staticmethod
    def tag_score(item: Item, plan: QueryPlan) -> int:
        score = 0
        tag_weight = plan.weights.tag_weight
        for tag in item.tags:
            weight = tag_weight.get(tag)
            if not weight:
                continue
            if tag in plan.favorite_tags:
                score += FAVORITE_TAG_MATCH_BONUS
            score += weight * TAG_MATCH_MULTIPLIER
        return score

    @staticmethod
    def cast_score(item: Item, plan: QueryPlan) -> int:
        cast_weight = plan.weights.cast_weight
        return sum(cast_weight.get(actor, 0) * CAST_MATCH_MULTIPLIER for actor in item.cast)

    @classmethod
    def score(cls, item: Item, plan: QueryPlan) -> int:
        return cls.tag_score(item, plan) + cls.cast_score(item, plan)
