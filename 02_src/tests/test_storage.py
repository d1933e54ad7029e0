"""Tests for storage adapters."""

import pytest

from mobile_analytics.storage import MemoryStorage, SqliteStorage, StorageKey


class TestMemoryStorage:
    """Tests for MemoryStorage."""

    def test_get_missing_returns_default(self):
        storage = MemoryStorage()
        assert storage.get("nope") is None
        assert storage.get("nope", []) == []

    def test_set_and_get(self):
        storage = MemoryStorage()
        storage.set("k", {"a": [1, 2]})
        assert storage.get("k") == {"a": [1, 2]}

    def test_values_are_copied(self):
        """Test callers cannot mutate stored values in place."""
        storage = MemoryStorage()
        value = {"a": [1]}
        storage.set("k", value)
        value["a"].append(2)

        fetched = storage.get("k")
        fetched["a"].append(3)

        assert storage.get("k") == {"a": [1]}


class TestSqliteStorage:
    """Tests for SqliteStorage."""

    async def test_init_creates_table(self, sqlite_storage):
        async with sqlite_storage._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table'"
        ) as cursor:
            tables = [row[0] for row in await cursor.fetchall()]
        assert "kv_store" in tables

    async def test_set_is_visible_immediately(self, sqlite_storage):
        """Test reads come from the cache without waiting for a flush."""
        sqlite_storage.set(StorageKey.EVENTS.value, [{"eventType": "a"}])
        assert sqlite_storage.get(StorageKey.EVENTS.value) == [{"eventType": "a"}]

    async def test_values_survive_reopen(self, tmp_path):
        """Test flushed values are loaded by a new instance."""
        path = tmp_path / "analytics.db"
        first = SqliteStorage(path)
        await first.init()
        first.set(StorageKey.BATCH_INDEX.value, ["b1", "b2"])
        first.set(StorageKey.BATCH_INDEX.value, ["b2"])
        await first.close()

        second = SqliteStorage(path)
        await second.init()
        try:
            assert second.get(StorageKey.BATCH_INDEX.value) == ["b2"]
        finally:
            await second.close()

    async def test_background_flush(self, sqlite_storage):
        """Test set schedules a write without an explicit flush."""
        sqlite_storage.set("k", {"v": 1})
        await sqlite_storage._flush_task

        async with sqlite_storage._conn.execute(
            "SELECT value FROM kv_store WHERE key = ?", ("k",)
        ) as cursor:
            row = await cursor.fetchone()
        assert row[0] == '{"v": 1}'

    async def test_flush_before_init_raises(self, tmp_path):
        storage = SqliteStorage(tmp_path / "x.db")
        with pytest.raises(RuntimeError):
            await storage.flush()

    async def test_memory_path(self):
        storage = SqliteStorage(":memory:")
        await storage.init()
        storage.set("k", 1)
        await storage.flush()
        assert storage.get("k") == 1
        await storage.close()

    async def test_unencodable_value_stored_as_string(self, sqlite_storage):
        """Test values json cannot encode fall back to their str() form."""

        class Marker:
            def __str__(self):
                return "marker"

        sqlite_storage.set("k", {"thing": Marker()})
        await sqlite_storage.flush()

        assert sqlite_storage.get("k") == {"thing": "marker"}
