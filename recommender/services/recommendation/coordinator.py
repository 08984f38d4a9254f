import itertools
from collections.abc import Iterable

from cachetools import TTLCache
from loguru import logger

from recommender.core.config import settings
from recommender.models.profile import PreferenceProfile
from recommender.models.recommendation import RecommendationRun
from recommender.services.preference_store import redact_user_id
from recommender.services.recommendation.engine import RecommendationEngine, recommendation_engine

RunContext = tuple[str, str | None, frozenset[str], int]


class RecommendationCoordinator:
    """
    Last-request-wins wrapper around the engine.

    A user's generation moves forward only when their profile changes. A computation
    captures the generation it started from; if the profile changed while it was running
    the result is reported as superseded, carries no recommendations and is never
    published. Computations over the same profile never supersede each other.

    Published runs are keyed by the request context (current item, exclusions, limit),
    so a narrow request never replaces the result of a broader one. Both maps are
    bounded and expire, idle users are forgotten.
    """

    def __init__(self, engine: RecommendationEngine, max_entries: int | None = None, ttl: int | None = None):
        self.engine = engine
        max_entries = settings.RECOMMENDATION_STATE_MAX_ENTRIES if max_entries is None else max_entries
        ttl = settings.RECOMMENDATION_STATE_TTL_SECONDS if ttl is None else ttl
        self._generations: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl)
        self._latest: TTLCache = TTLCache(maxsize=max_entries, ttl=ttl)
        # Shared across users so a generation value is never reused after eviction
        self._counter = itertools.count(1)

    @staticmethod
    def context(
        user_id: str,
        current_item_id: str | None = None,
        exclude_ids: Iterable[str] = (),
        limit: int | None = None,
    ) -> RunContext:
        limit = settings.RECOMMENDATION_LIMIT if limit is None else limit
        return (user_id, current_item_id, frozenset(exclude_ids), limit)

    def current(self, user_id: str) -> int:
        """Generation of the user's profile, 0 until the first mutation is recorded."""
        return self._generations.get(user_id, 0)

    def advance(self, user_id: str) -> int:
        """Record a profile mutation; computations started before it become stale."""
        generation = next(self._counter)
        self._generations[user_id] = generation
        return generation

    def is_current(self, user_id: str, generation: int) -> bool:
        return self.current(user_id) == generation

    def latest(
        self,
        user_id: str,
        current_item_id: str | None = None,
        exclude_ids: Iterable[str] = (),
        limit: int | None = None,
    ) -> RecommendationRun | None:
        return self._latest.get(self.context(user_id, current_item_id, exclude_ids, limit))

    async def refresh(
        self,
        user_id: str,
        profile: PreferenceProfile,
        current_item_id: str | None = None,
        exclude_ids: Iterable[str] = (),
        limit: int | None = None,
        generation: int | None = None,
    ) -> RecommendationRun:
        """
        Compute and publish recommendations for ``profile``.

        ``generation`` is the profile generation ``profile`` was read at; callers that load
        the profile should capture it before loading. Defaults to the current generation.
        """
        if generation is None:
            generation = self.current(user_id)
        exclude_ids = tuple(exclude_ids)

        recommendations = await self.engine.compute_recommendations(
            profile, current_item_id=current_item_id, exclude_ids=exclude_ids, limit=limit
        )

        if not self.is_current(user_id, generation):
            logger.info(
                f"[{redact_user_id(user_id)}] Discarding recommendations for generation {generation}; "
                f"profile is now at generation {self.current(user_id)}"
            )
            return RecommendationRun(generation=generation, superseded=True)

        run = RecommendationRun(generation=generation, recommendations=recommendations)
        self._latest[self.context(user_id, current_item_id, exclude_ids, limit)] = run
        return run


recommendation_coordinator = RecommendationCoordinator(recommendation_engine)
