"""Unit tests for PreferenceStore."""

import asyncio
import json

import pytest

from recommender.core.exceptions import PersistenceError, ProfileValidationError
from recommender.models.item import Item
from recommender.services.preference_store import PreferenceStore, get_preference_store, redact_user_id

KEY = "test:wishlist:user-1"


@pytest.fixture
def store(kv):
    return PreferenceStore("user-1", kv, key_prefix="test:wishlist:")


class TestLoad:
    def test_missing_key_gives_empty_profile(self, store):
        profile = asyncio.run(store.load())

        assert profile.favorite_tags == []
        assert profile.favorite_items == []

    def test_reads_stored_payload(self, store, kv, stored_payload):
        kv.data[KEY] = stored_payload

        profile = asyncio.run(store.load())

        assert profile.favorite_tags == ["healing", "sleep"]
        assert profile.favorite_items[0].title == "Rainy night"
        assert profile.favorite_items[0].release_date == "2024-05-01"

    def test_corrupt_json_gives_empty_profile(self, store, kv):
        kv.data[KEY] = "{not json"

        assert not asyncio.run(store.load()).has_signals()

    def test_unavailable_store_gives_empty_profile(self, store, kv, stored_payload):
        kv.data[KEY] = stored_payload
        kv.read_down = True

        assert not asyncio.run(store.load()).has_signals()

    def test_undecodable_value_gives_empty_profile(self):
        class _BinaryBackend:
            async def read(self, key):
                raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")

        store = PreferenceStore("user-1", _BinaryBackend(), key_prefix="test:wishlist:")

        assert not asyncio.run(store.load()).has_signals()

    def test_deeply_nested_payload_gives_empty_profile(self, store, kv):
        kv.data[KEY] = "[" * 100000

        assert not asyncio.run(store.load()).has_signals()


class TestMutations:
    def test_add_tag_persists_whole_profile(self, store, kv):
        asyncio.run(store.add_tag("healing"))
        profile = asyncio.run(store.add_tag("sleep"))

        assert profile.favorite_tags == ["healing", "sleep"]
        assert json.loads(kv.data[KEY]) == {"tags": ["healing", "sleep"], "items": []}

    def test_add_tag_strips_and_rejects_blank(self, store):
        assert asyncio.run(store.add_tag("  healing ")).favorite_tags == ["healing"]
        with pytest.raises(ProfileValidationError):
            asyncio.run(store.add_tag("   "))

    def test_duplicate_add_is_a_no_op(self, store, kv):
        asyncio.run(store.add_tag("healing"))
        asyncio.run(store.add_item({"id": "P1", "tags": ["daily"]}))
        writes = kv.writes

        asyncio.run(store.add_tag("healing"))
        profile = asyncio.run(store.add_item(Item(id="P1", title="again")))

        assert kv.writes == writes
        assert profile.favorite_tags == ["healing"]
        assert [it.id for it in profile.favorite_items] == ["P1"]
        assert profile.favorite_items[0].title is None

    def test_add_item_rejects_document_without_id(self, store):
        with pytest.raises(ProfileValidationError):
            asyncio.run(store.add_item({"title": "orphan"}))

    def test_remove_and_clear(self, store, stored_payload, kv):
        kv.data[KEY] = stored_payload

        assert asyncio.run(store.remove_tag("sleep")).favorite_tags == ["healing"]
        assert asyncio.run(store.remove_item("RJ01")).favorite_items == []

        asyncio.run(store.add_item({"id": "P5"}))
        asyncio.run(store.clear())
        profile = asyncio.run(store.clear_tags())

        assert not profile.has_signals()
        assert json.loads(kv.data[KEY]) == {"tags": [], "items": []}

    def test_contains(self, store, stored_payload, kv):
        kv.data[KEY] = stored_payload

        assert asyncio.run(store.contains_item("RJ01")) is True
        assert asyncio.run(store.contains_item("RJ02")) is False
        assert asyncio.run(store.contains_tag("healing")) is True

    def test_failed_save_raises_and_keeps_caller_profile(self, store, kv):
        profile = asyncio.run(store.add_tag("healing"))
        kv.write_down = True

        with pytest.raises(PersistenceError):
            asyncio.run(store.add_tag("sleep"))

        assert profile.favorite_tags == ["healing"]
        assert json.loads(kv.data[KEY])["tags"] == ["healing"]


def test_get_preference_store_uses_configured_prefix(monkeypatch, kv):
    monkeypatch.setattr("recommender.services.preference_store.redis_service", kv)

    store = get_preference_store("abc")

    assert store.backend is kv
    assert store.key.endswith("abc")


@pytest.mark.parametrize(
    "user_id, expected",
    [(None, "anonymous"), ("", "anonymous"), ("abc", "***"), ("user-12345", "user…(10)")],
)
def test_redact_user_id(user_id, expected):
    assert redact_user_id(user_id) == expected
