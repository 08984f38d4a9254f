from collections.abc import Iterable

from loguru import logger

from recommender.core.config import settings
from recommender.models.profile import PreferenceProfile
from recommender.models.recommendation import ScoredItem
from recommender.services.catalog.service import CatalogGateway, catalog_service
from recommender.services.recommendation.aggregator import CandidateAggregator
from recommender.services.recommendation.planner import QueryPlanner
from recommender.services.recommendation.ranker import rank
from recommender.services.recommendation.scoring import RecommendationScoring


class RecommendationEngine:
    """
    Favorites-based recommendation pipeline.

    profile → QueryPlanner → terms → CandidateAggregator → RecommendationScoring → rank.
    """

    def __init__(
        self,
        gateway: CatalogGateway,
        planner: QueryPlanner | None = None,
        concurrency: int | None = None,
    ):
        self.planner = planner or QueryPlanner()
        self.aggregator = CandidateAggregator(gateway, concurrency=concurrency)

    async def compute_recommendations(
        self,
        profile: PreferenceProfile,
        current_item_id: str | None = None,
        exclude_ids: Iterable[str] = (),
        limit: int | None = None,
    ) -> list[ScoredItem]:
        """
        Rank catalog items for ``profile``. Never raises; failures yield an empty list.
        """
        limit = settings.RECOMMENDATION_LIMIT if limit is None else limit
        try:
            plan = self.planner.plan(profile)
            if plan.is_empty:
                return []

            logger.info(f"Recommendation terms: tags={plan.tag_terms} cast={plan.cast_terms}")
            candidates = await self.aggregator.collect(
                plan.tag_terms,
                plan.cast_terms,
                current_item_id=current_item_id,
                exclude_ids=exclude_ids,
                favorite_ids=profile.item_ids,
            )

            scored = [
                ScoredItem(item=item, score=RecommendationScoring.score(item, plan)) for item in candidates.values()
            ]
            ranked = rank(scored, limit)
            logger.info(f"Ranked {len(scored)} candidates, returning {len(ranked)}")
            return ranked
        except Exception as e:
            logger.exception(f"Failed to compute recommendations: {e}")
            return []


recommendation_engine = RecommendationEngine(catalog_service)
