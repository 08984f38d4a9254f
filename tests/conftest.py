"""Shared test fixtures and fakes for pytest."""

import asyncio
import json

import pytest

from recommender.core.exceptions import CatalogUnavailableError
from recommender.models.item import Item
from recommender.models.profile import PreferenceProfile
from recommender.services.redis_service import StoreUnavailable


# ===== Fakes =====


class FakeKeyValue:
    """In-memory stand-in for RedisService."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data = dict(data or {})
        self.read_down = False
        self.write_down = False
        self.writes = 0

    async def read(self, key: str) -> str | None:
        if self.read_down:
            raise StoreUnavailable("connection refused")
        return self.data.get(key)

    async def write(self, key: str, value: str) -> bool:
        if self.write_down:
            return False
        self.writes += 1
        self.data[key] = value
        return True


class FakeCatalog:
    """Catalog gateway answering from fixed tables and recording every call."""

    def __init__(self, by_tag=None, by_cast=None, failing=(), delays=None):
        self.by_tag = by_tag or {}
        self.by_cast = by_cast or {}
        self.failing = set(failing)
        self.delays = delays or {}
        self.calls: list[tuple[str, str]] = []

    async def _answer(self, kind: str, term: str, table: dict) -> list[Item]:
        self.calls.append((kind, term))
        if term in self.delays:
            await asyncio.sleep(self.delays[term])
        if term in self.failing:
            raise CatalogUnavailableError(kind, term, RuntimeError("backend timeout"))
        return [Item.from_document(doc) for doc in table.get(term, [])]

    async def fetch_by_tag(self, tag: str) -> list[Item]:
        return await self._answer("tag", tag, self.by_tag)

    async def fetch_by_cast(self, cast_member: str) -> list[Item]:
        return await self._answer("cast", cast_member, self.by_cast)


# ===== Sample Data Fixtures =====


@pytest.fixture
def kv() -> FakeKeyValue:
    return FakeKeyValue()


@pytest.fixture
def scenario_profile() -> PreferenceProfile:
    """Favorite tag 'healing' plus one favorited item P1."""
    return PreferenceProfile(
        favorite_tags=["healing"],
        favorite_items=[Item(id="P1", tags=["daily"], cast=["A"])],
    )


@pytest.fixture
def scenario_catalog() -> FakeCatalog:
    p2 = {"id": "P2", "tags": ["healing", "daily"], "cast": []}
    return FakeCatalog(
        by_tag={
            "healing": [p2],
            "daily": [p2, {"id": "P3", "tags": ["daily"], "cast": []}],
        },
        by_cast={"A": [{"id": "P4", "tags": [], "cast": ["A"]}]},
    )


@pytest.fixture
def stored_payload() -> str:
    return json.dumps(
        {
            "tags": ["healing", "sleep"],
            "items": [
                {
                    "id": "RJ01",
                    "title": "Rainy night",
                    "maker": "Studio K",
                    "releaseDate": "2024-05-01",
                    "tags": ["healing", "asmr"],
                    "cast": ["Aoi"],
                }
            ],
        }
    )


@pytest.fixture
def make_catalog():
    """Factory for catalogs with custom tables."""
    return FakeCatalog
