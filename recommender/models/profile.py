from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, field_validator

from recommender.core.exceptions import ProfileValidationError
from recommender.models.item import Item


class PreferenceProfile(BaseModel):
    """
    A user's accumulated preference signals.

    ``favorite_tags`` is the explicit signal, ``favorite_items`` the implicit one. Both are
    ordered and unique: tags by value, items by id. Mutators return a new profile so a
    caller's copy is never changed behind its back.
    """

    model_config = ConfigDict(populate_by_name=True)

    favorite_tags: list[str] = Field(default_factory=list, alias="tags")
    favorite_items: list[Item] = Field(default_factory=list, alias="items")

    @field_validator("favorite_tags")
    @classmethod
    def _unique_tags(cls, tags: list[str]) -> list[str]:
        return list(dict.fromkeys(tags))

    @field_validator("favorite_items")
    @classmethod
    def _unique_items(cls, items: list[Item]) -> list[Item]:
        unique: dict[str, Item] = {}
        for item in items:
            unique.setdefault(item.id, item)
        return list(unique.values())

    @classmethod
    def empty(cls) -> "PreferenceProfile":
        return cls()

    @classmethod
    def from_payload(cls, payload: Any) -> "PreferenceProfile":
        """
        Build a profile from a stored payload, dropping malformed entries.

        Accepts ``{"tags": [...], "items": [...]}`` and the legacy items-only list.
        Anything else yields an empty profile.
        """
        if isinstance(payload, list):
            raw_tags, raw_items = [], payload
        elif isinstance(payload, dict):
            raw_tags = payload.get("tags") or []
            raw_items = payload.get("items") or []
        else:
            logger.debug(f"Ignoring preference payload of type {type(payload).__name__}")
            return cls.empty()

        tags: list[str] = []
        if isinstance(raw_tags, list):
            for raw in raw_tags:
                try:
                    tags.append(normalize_tag(raw))
                except ProfileValidationError as e:
                    logger.debug(f"Dropping favorite tag {raw!r}: {e}")

        items: list[Item] = []
        if isinstance(raw_items, list):
            for raw in raw_items:
                try:
                    items.append(Item.from_document(raw))
                except ProfileValidationError as e:
                    logger.debug(f"Dropping favorite item: {e}")

        return cls(favorite_tags=tags, favorite_items=items)

    def to_payload(self) -> dict[str, Any]:
        return {
            "tags": list(self.favorite_tags),
            "items": [item.to_document() for item in self.favorite_items],
        }

    @property
    def item_ids(self) -> set[str]:
        return {item.id for item in self.favorite_items}

    def has_signals(self) -> bool:
        return bool(self.favorite_tags or self.favorite_items)

    def contains_tag(self, tag: str) -> bool:
        return tag in self.favorite_tags

    def contains_item(self, item_id: str) -> bool:
        return any(item.id == item_id for item in self.favorite_items)

    def with_tag(self, tag: str) -> "PreferenceProfile":
        if tag in self.favorite_tags:
            return self
        return self.model_copy(update={"favorite_tags": [*self.favorite_tags, tag]})

    def without_tag(self, tag: str) -> "PreferenceProfile":
        return self.model_copy(update={"favorite_tags": [t for t in self.favorite_tags if t != tag]})

    def without_tags(self) -> "PreferenceProfile":
        return self.model_copy(update={"favorite_tags": []})

    def with_item(self, item: Item) -> "PreferenceProfile":
        if self.contains_item(item.id):
            return self
        return self.model_copy(update={"favorite_items": [*self.favorite_items, item]})

    def without_item(self, item_id: str) -> "PreferenceProfile":
        return self.model_copy(update={"favorite_items": [it for it in self.favorite_items if it.id != item_id]})

    def without_items(self) -> "PreferenceProfile":
        return self.model_copy(update={"favorite_items": []})


def normalize_tag(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ProfileValidationError("tag must be a string")
    tag = raw.strip()
    if not tag:
        raise ProfileValidationError("tag must not be empty")
    return tag
