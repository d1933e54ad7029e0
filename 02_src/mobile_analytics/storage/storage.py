"""Key/value storage adapters.

The client reads and writes storage synchronously. ``SqliteStorage`` keeps a
write-through cache and persists dirty keys to SQLite in the background.
"""

import asyncio
import copy
import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from ..config import PathLike, resolve_db_path
from ..logging_config import get_logger
from ..utils import dumps_json

logger = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class StorageKey(str, Enum):
    """Keys the client persists under."""

    EVENTS = "MobileAnalyticsEventStorage"
    BATCHES = "MobileAnalyticsBatchStorage"
    BATCH_INDEX = "MobileAnalyticsBatchIndexStorage"
    GLOBAL_ATTRIBUTES = "MobileAnalyticsGlobalAttributes"
    GLOBAL_METRICS = "MobileAnalyticsGlobalMetrics"
    CLIENT_ID = "MobileAnalyticsClientId"


class IStorage(Protocol):
    """Synchronous, durable key/value store. Values are JSON-serializable."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the stored value, or ``default`` when the key is absent."""
        ...

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``, replacing any previous value."""
        ...


class MemoryStorage:
    """In-process storage. Not durable; used for tests and ephemeral clients."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)


class SqliteStorage:
    """SQLite-backed storage with a write-through cache."""

    def __init__(self, db_path: PathLike | None = None):
        if db_path is None:
            db_path = os.getenv("ANALYTICS_DB_PATH")
        self._db_path = resolve_db_path(db_path)
        self._conn: aiosqlite.Connection | None = None
        self._cache: dict[str, str] = {}
        self._dirty: set[str] = set()
        self._write_lock = asyncio.Lock()
        self._flush_task: asyncio.Task | None = None

    async def init(self) -> None:
        """Open the database, create the table and load every key."""
        if str(self._db_path) != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = await aiosqlite.connect(self._db_path)
        await self._conn.executescript(SCHEMA_SQL)
        await self._conn.commit()

        async with self._conn.execute("SELECT key, value FROM kv_store") as cursor:
            rows = await cursor.fetchall()
        self._cache = {row[0]: row[1] for row in rows}
        logger.debug("Loaded %s key(s) from %s", len(self._cache), self._db_path)

    async def close(self) -> None:
        """Flush pending writes and close the connection."""
        if self._conn:
            await self.flush()
            await self._conn.close()
            self._conn = None

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._cache:
            return default
        return json.loads(self._cache[key])

    def set(self, key: str, value: Any) -> None:
        self._cache[key] = dumps_json(value)
        self._dirty.add(key)
        self._schedule_flush()

    def _schedule_flush(self) -> None:
        if self._conn is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Written on the next explicit flush() or close()
            return
        if self._flush_task is None or self._flush_task.done():
            self._flush_task = loop.create_task(self._flush_in_background())

    async def _flush_in_background(self) -> None:
        if self._conn is None:
            return
        try:
            await self.flush()
        except aiosqlite.Error as e:
            logger.error("Background flush of %s failed: %s", self._db_path, e, exc_info=True)

    async def flush(self) -> None:
        """Write every dirty key in a single transaction."""
        if not self._conn:
            raise RuntimeError("Storage not initialized")

        async with self._write_lock:
            while self._dirty:
                keys = list(self._dirty)
                self._dirty.clear()
                rows = [(key, self._cache[key]) for key in keys]
                try:
                    await self._conn.executemany(
                        """
                        INSERT OR REPLACE INTO kv_store (key, value, updated_at)
                        VALUES (?, ?, CURRENT_TIMESTAMP)
                        """,
                        rows,
                    )
                    await self._conn.commit()
                except aiosqlite.Error:
                    self._dirty.update(keys)
                    raise
