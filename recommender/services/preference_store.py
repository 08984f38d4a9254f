import json
from typing import Any, Protocol

from loguru import logger

from recommender.core.config import settings
from recommender.core.constants import PREFERENCE_KEY
from recommender.core.exceptions import PersistenceError
from recommender.models.item import Item
from recommender.models.profile import PreferenceProfile, normalize_tag
from recommender.services.redis_service import StoreUnavailable, redis_service


def redact_user_id(user_id: str | None, keep: int = 4) -> str:
    """Log-safe form of a user id: a short prefix plus the original length."""
    if not user_id:
        return "anonymous"
    if len(user_id) <= keep:
        return "*" * len(user_id)
    return f"{user_id[:keep]}…({len(user_id)})"


class KeyValueBackend(Protocol):
    async def read(self, key: str) -> str | None: ...

    async def write(self, key: str, value: str) -> bool: ...


class PreferenceStore:
    """
    Durable preference profile for one user, stored as a single JSON value.

    Every mutation is a whole-profile read-modify-write. Concurrent writers (two tabs)
    may lose an update; the last save wins.
    """

    def __init__(self, user_id: str, backend: KeyValueBackend, key_prefix: str | None = None):
        self.user_id = user_id
        self.backend = backend
        prefix = settings.PREFERENCE_KEY_PREFIX if key_prefix is None else key_prefix
        self.key = PREFERENCE_KEY.format(prefix=prefix, user_id=user_id)

    async def load(self) -> PreferenceProfile:
        """Load the profile, falling back to an empty one on any read or decode failure."""
        try:
            raw = await self.backend.read(self.key)
            if not raw:
                return PreferenceProfile.empty()
            payload = json.loads(raw)
        except StoreUnavailable as e:
            logger.warning(f"[{redact_user_id(self.user_id)}] Preference store unavailable, using empty profile: {e}")
            return PreferenceProfile.empty()
        except (ValueError, RecursionError) as e:
            # JSONDecodeError, UnicodeDecodeError from a non UTF-8 value, or nesting too deep to decode
            logger.warning(
                f"[{redact_user_id(self.user_id)}] Corrupt preference payload, using empty profile: "
                f"{type(e).__name__}"
            )
            return PreferenceProfile.empty()

        return PreferenceProfile.from_payload(payload)

    async def save(self, profile: PreferenceProfile) -> PreferenceProfile:
        """Persist the full profile. Raises PersistenceError if the write is rejected."""
        ok = await self.backend.write(self.key, json.dumps(profile.to_payload(), ensure_ascii=False))
        if not ok:
            raise PersistenceError(self.key, "write rejected")
        logger.debug(
            f"[{redact_user_id(self.user_id)}] Saved profile "
            f"({len(profile.favorite_tags)} tags, {len(profile.favorite_items)} items)"
        )
        return profile

    async def _update(self, change) -> PreferenceProfile:
        current = await self.load()
        updated = change(current)
        if updated is current:
            return current
        return await self.save(updated)

    async def add_tag(self, tag: str) -> PreferenceProfile:
        tag = normalize_tag(tag)
        return await self._update(lambda p: p.with_tag(tag))

    async def remove_tag(self, tag: str) -> PreferenceProfile:
        return await self._update(lambda p: p.without_tag(tag) if p.contains_tag(tag) else p)

    async def clear_tags(self) -> PreferenceProfile:
        return await self._update(lambda p: p.without_tags() if p.favorite_tags else p)

    async def add_item(self, item: Item | dict[str, Any]) -> PreferenceProfile:
        if not isinstance(item, Item):
            item = Item.from_document(item)
        return await self._update(lambda p: p.with_item(item))

    async def remove_item(self, item_id: str) -> PreferenceProfile:
        return await self._update(lambda p: p.without_item(item_id) if p.contains_item(item_id) else p)

    async def clear(self) -> PreferenceProfile:
        return await self._update(lambda p: p.without_items() if p.favorite_items else p)

    async def contains_item(self, item_id: str) -> bool:
        return (await self.load()).contains_item(item_id)

    async def contains_tag(self, tag: str) -> bool:
        return (await self.load()).contains_tag(tag)


def get_preference_store(user_id: str) -> PreferenceStore:
    return PreferenceStore(user_id, redis_service)
