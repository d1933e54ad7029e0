"""Storage module."""

from .storage import IStorage, MemoryStorage, SqliteStorage, StorageKey

__all__ = ["IStorage", "MemoryStorage", "SqliteStorage", "StorageKey"]
