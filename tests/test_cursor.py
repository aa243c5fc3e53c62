"""
Tests for the cursor store.
"""

import json

from pbwatch.models import RawScore, ScoreCursor
from pbwatch.service import CursorStore, HashNovelty
from pbwatch.storage import MemoryKeyValueStore

from tests.fakes import make_score, ts

import pytest


def recent(*minutes: int) -> list[RawScore]:
    return [RawScore.model_validate(make_score(m, 100.0, ts(m))) for m in minutes]


class TestLoad:
    """Tests for CursorStore.load."""

    async def test_missing(self, cursor_store: CursorStore):
        assert await cursor_store.load() is None

    @pytest.mark.parametrize("raw", ["{not json", "[]", "null", '{"created_at": "yesterday-ish"}'])
    async def test_corrupt_is_empty(self, store: MemoryKeyValueStore, cursor_store: CursorStore, raw: str):
        await store.put("last_seen", raw)
        assert await cursor_store.load() is None

    async def test_legacy_record(self, store: MemoryKeyValueStore, cursor_store: CursorStore):
        await store.put(
            "last_seen",
            json.dumps(
                {
                    "score": 1234,
                    "mod_acronyms": ["HD"],
                    "created_at": "2024-06-01T12:03:00Z",
                    "rank": "A",
                    "id": 3,
                    "pp": 321.5,
                    "beatmap_id": 30,
                    "beatmapset_id": 300,
                    "diff_name": "Insane",
                    "artist": "Artist",
                    "set_mapper": "Mapper",
                    "title": "Title",
                }
            ),
        )
        cursor = await cursor_store.load()
        assert cursor is not None
        assert cursor.pp == 321.5
        assert cursor.title == "Title"


class TestUpdateCursor:
    """Tests for CursorStore.update_cursor."""

    async def test_writes_newest_entry(self, store: MemoryKeyValueStore, cursor_store: CursorStore):
        assert await cursor_store.update_cursor(recent(5, 4, 3)) is True
        stored = ScoreCursor.model_validate_json(await store.get("last_seen"))
        assert stored.id == 5
        assert stored.created_at == RawScore.model_validate(make_score(5, 1.0, ts(5))).ended_at

    async def test_unchanged_newest_not_rewritten(self, store: MemoryKeyValueStore, cursor_store: CursorStore):
        await cursor_store.update_cursor(recent(5, 4))
        before = await store.get("last_seen")
        await store.put("last_seen", before.replace('"title":"Title"', '"title":"Marker"'))

        assert await cursor_store.update_cursor(recent(5, 4)) is False
        assert '"title":"Marker"' in await store.get("last_seen")

    async def test_empty_recent_keeps_cursor(self, store: MemoryKeyValueStore, cursor_store: CursorStore):
        await cursor_store.update_cursor(recent(2))
        assert await cursor_store.update_cursor([]) is False
        assert ScoreCursor.model_validate_json(await store.get("last_seen")).id == 2

    async def test_uses_given_current_cursor(self, cursor_store: CursorStore):
        current = ScoreCursor(created_at=ts(9))
        assert await cursor_store.update_cursor(recent(9, 8), current) is False

    async def test_overwrites_corrupt_cursor(self, store: MemoryKeyValueStore, cursor_store: CursorStore):
        await store.put("last_seen", "garbage")
        assert await cursor_store.update_cursor(recent(1)) is True
        assert (await cursor_store.load()).id == 1

    async def test_hash_strategy_stores_digest(self, store: MemoryKeyValueStore):
        cursor_store = CursorStore(store, key="cursor", strategy=HashNovelty())
        await cursor_store.update_cursor(recent(3, 2))
        cursor = await cursor_store.load()
        assert cursor is not None
        assert cursor.digest is not None
        assert await cursor_store.update_cursor(recent(3, 2)) is False
