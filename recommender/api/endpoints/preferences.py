from collections.abc import Awaitable, Callable

from fastapi import APIRouter, BackgroundTasks, HTTPException
from loguru import logger
from pydantic import BaseModel, Field

from recommender.core.exceptions import PersistenceError, ProfileValidationError
from recommender.models.item import Item
from recommender.models.profile import PreferenceProfile
from recommender.services.preference_store import PreferenceStore, get_preference_store, redact_user_id
from recommender.services.recommendation.coordinator import recommendation_coordinator

router = APIRouter(prefix="/{user_id}/preferences", tags=["preferences"])


class TagRequest(BaseModel):
    tag: str = Field(description="Tag to add to the user's favorites")


async def _mutate(
    user_id: str,
    background_tasks: BackgroundTasks,
    change: Callable[[PreferenceStore], Awaitable[PreferenceProfile]],
) -> dict:
    store = get_preference_store(user_id)
    try:
        profile = await change(store)
    except ProfileValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except PersistenceError as e:
        logger.error(f"[{redact_user_id(user_id)}] Failed to save preferences: {e}")
        raise HTTPException(status_code=503, detail="Preferences could not be saved, please retry.")

    # The profile changed: computations still running over the old one are now stale
    generation = recommendation_coordinator.advance(user_id)
    background_tasks.add_task(recommendation_coordinator.refresh, user_id, profile, generation=generation)
    return profile.to_payload()


@router.get("")
async def get_preferences(user_id: str) -> dict:
    profile = await get_preference_store(user_id).load()
    return profile.to_payload()


@router.post("/tags")
async def add_tag(user_id: str, payload: TagRequest, background_tasks: BackgroundTasks) -> dict:
    return await _mutate(user_id, background_tasks, lambda store: store.add_tag(payload.tag))


@router.delete("/tags/{tag}")
async def remove_tag(user_id: str, tag: str, background_tasks: BackgroundTasks) -> dict:
    return await _mutate(user_id, background_tasks, lambda store: store.remove_tag(tag))


@router.delete("/tags")
async def clear_tags(user_id: str, background_tasks: BackgroundTasks) -> dict:
    return await _mutate(user_id, background_tasks, lambda store: store.clear_tags())


@router.post("/items")
async def add_item(user_id: str, payload: Item, background_tasks: BackgroundTasks) -> dict:
    return await _mutate(user_id, background_tasks, lambda store: store.add_item(payload))


@router.get("/items/{item_id}")
async def is_item_favorited(user_id: str, item_id: str) -> dict:
    favorited = await get_preference_store(user_id).contains_item(item_id)
    return {"item_id": item_id, "favorited": favorited}


@router.delete("/items/{item_id}")
async def remove_item(user_id: str, item_id: str, background_tasks: BackgroundTasks) -> dict:
    return await _mutate(user_id, background_tasks, lambda store: store.remove_item(item_id))


@router.delete("/items")
async def clear_items(user_id: str, background_tasks: BackgroundTasks) -> dict:
    return await _mutate(user_id, background_tasks, lambda store: store.clear())
