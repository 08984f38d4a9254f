from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from recommender.core.exceptions import ProfileValidationError


def _clean_terms(value: Any) -> tuple[str, ...]:
    """Keep non-empty strings only, first occurrence wins."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple, set, frozenset)):
        return ()

    seen: dict[str, None] = {}
    for raw in value:
        if not isinstance(raw, str):
            continue
        term = raw.strip()
        if term and term not in seen:
            seen[term] = None
    return tuple(seen)


class Item(BaseModel):
    """
    A catalog item as seen by the recommender.

    Only ``id``, ``tags`` and ``cast`` take part in ranking. The remaining fields are the
    display snapshot kept alongside a favorited item so the favorites page can render it
    without another catalog lookup.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    tags: tuple[str, ...] = ()
    cast: tuple[str, ...] = ()

    title: str | None = None
    maker: str | None = None
    release_date: str | None = Field(default=None, alias="releaseDate")
    affiliate_link: str | None = Field(default=None, alias="affiliateLink")
    thumbnail_url: str | None = Field(default=None, alias="thumbnailUrl")

    @field_validator("id", mode="before")
    @classmethod
    def _validate_id(cls, value: Any) -> str:
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise ValueError("item id must be a string")
        item_id = str(value).strip()
        if not item_id:
            raise ValueError("item id must not be empty")
        return item_id

    @field_validator("tags", "cast", mode="before")
    @classmethod
    def _validate_terms(cls, value: Any) -> tuple[str, ...]:
        return _clean_terms(value)

    @field_validator("title", "maker", "release_date", "affiliate_link", "thumbnail_url", mode="before")
    @classmethod
    def _validate_display(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return None

    @classmethod
    def from_document(cls, doc: Any) -> "Item":
        """Normalize a raw catalog or storage document into an Item."""
        if not isinstance(doc, dict):
            raise ProfileValidationError(f"item document must be an object, got {type(doc).__name__}")
        try:
            return cls.model_validate(doc)
        except ValidationError as exc:
            raise ProfileValidationError(f"invalid item document: {exc.errors()[0].get('msg')}") from exc

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
