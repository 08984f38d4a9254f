from typing import Any, Protocol

import httpx
from loguru import logger

from recommender.core.exceptions import CatalogUnavailableError, ProfileValidationError
from recommender.models.item import Item
from recommender.services.catalog.client import CatalogClient


class CatalogGateway(Protocol):
    """Resolves a single term to the catalog items carrying it."""

    async def fetch_by_tag(self, tag: str) -> list[Item]: ...

    async def fetch_by_cast(self, cast_member: str) -> list[Item]: ...


class CatalogService:
    """
    HTTP-backed catalog gateway.

    Documents are normalized into ``Item`` here, once, so the rest of the pipeline never
    has to guard against missing fields. The backend's return order is preserved.
    """

    def __init__(self, client: CatalogClient | None = None):
        self.client = client or CatalogClient()

    async def close(self):
        await self.client.close()

    async def fetch_by_tag(self, tag: str) -> list[Item]:
        return await self._fetch("tag", tag)

    async def fetch_by_cast(self, cast_member: str) -> list[Item]:
        return await self._fetch("cast", cast_member)

    async def _fetch(self, kind: str, term: str) -> list[Item]:
        try:
            data = await self.client.get("/items", params={kind: term})
        except (httpx.HTTPError, ValueError) as e:
            raise CatalogUnavailableError(kind, term, e) from e
        return self._parse_items(data, kind, term)

    @staticmethod
    def _parse_items(data: Any, kind: str, term: str) -> list[Item]:
        if isinstance(data, dict):
            data = data.get("items")
        if not isinstance(data, list):
            raise CatalogUnavailableError(kind, term, ValueError("unexpected catalog response shape"))

        items = []
        for doc in data:
            try:
                items.append(Item.from_document(doc))
            except ProfileValidationError as e:
                logger.debug(f"Dropping catalog document for {kind} '{term}': {e}")
        return items


catalog_service = CatalogService()
