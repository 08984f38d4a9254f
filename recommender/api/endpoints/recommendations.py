from fastapi import APIRouter, HTTPException, Query

from recommender.core.config import settings
from recommender.core.constants import MAX_RECOMMENDATION_LIMIT
from recommender.models.recommendation import RecommendationRun
from recommender.services.preference_store import get_preference_store
from recommender.services.recommendation.coordinator import recommendation_coordinator

router = APIRouter(prefix="/{user_id}/recommendations", tags=["recommendations"])


@router.get("", response_model=RecommendationRun)
async def get_recommendations(
    user_id: str,
    current_item_id: str | None = Query(default=None, description="Item being viewed; never recommended"),
    exclude: list[str] | None = Query(default=None, description="Additional item ids to leave out"),
    limit: int = Query(default=settings.RECOMMENDATION_LIMIT, ge=1, le=MAX_RECOMMENDATION_LIMIT),
) -> RecommendationRun:
    """
    Recompute recommendations from the stored favorites.

    When the favorites change before this computation finishes the response is marked
    ``superseded`` and carries no items.
    """
    # Captured before the load so a save landing in between marks this run stale
    generation = recommendation_coordinator.current(user_id)
    profile = await get_preference_store(user_id).load()
    return await recommendation_coordinator.refresh(
        user_id,
        profile,
        current_item_id=current_item_id,
        exclude_ids=exclude or (),
        limit=limit,
        generation=generation,
    )


@router.get("/latest", response_model=RecommendationRun)
async def get_latest_recommendations(
    user_id: str,
    current_item_id: str | None = Query(default=None),
    exclude: list[str] | None = Query(default=None),
    limit: int = Query(default=settings.RECOMMENDATION_LIMIT, ge=1, le=MAX_RECOMMENDATION_LIMIT),
) -> RecommendationRun:
    """Most recent published run for the same request context."""
    run = recommendation_coordinator.latest(
        user_id, current_item_id=current_item_id, exclude_ids=exclude or (), limit=limit
    )
    if run is None:
        raise HTTPException(status_code=404, detail="No recommendations computed yet")
    return run
