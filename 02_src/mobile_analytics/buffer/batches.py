"""Stored batches and the ordered index of batches awaiting submission."""

import logging
from typing import Protocol

from ..logging_config import get_logger
from ..models import Batch, Event
from ..storage import IStorage, StorageKey


class IBatchStore(Protocol):
    """Batch map plus Batch Index, kept consistent with each other."""

    def add(self, batch: Batch) -> None:
        """Store a batch and append its id to the index."""
        ...

    def get(self, batch_id: str) -> Batch | None:
        """Stored batch, or None."""
        ...

    def ids(self) -> list[str]:
        """Pending batch ids, oldest first."""
        ...

    def clear(self, batch_id: str) -> bool:
        """Remove a batch from index and map. False if it was not indexed."""
        ...


class BatchStore:
    """A batch id is in the index if and only if its batch is in the map."""

    def __init__(self, storage: IStorage, logger: logging.Logger | None = None):
        self._storage = storage
        self._logger = logger or get_logger(__name__)
        self._batches: dict[str, list[Event]] = {}
        self._index: list[str] = []
        self.restore()

    def restore(self) -> None:
        """Reload map and index from storage and repair any mismatch."""
        stored_batches = self._storage.get(StorageKey.BATCHES.value) or {}
        stored_index = self._storage.get(StorageKey.BATCH_INDEX.value) or []

        self._batches = {}
        for batch_id, events in stored_batches.items():
            try:
                self._batches[batch_id] = [Event.from_dict(data) for data in events]
            except (KeyError, TypeError) as e:
                self._logger.warning("Dropping unreadable stored batch %s: %s", batch_id, e)

        self._index = [batch_id for batch_id in stored_index if batch_id in self._batches]
        orphans = [batch_id for batch_id in self._batches if batch_id not in self._index]
        if orphans:
            self._logger.warning("Re-indexing %s unindexed batch(es)", len(orphans))
            self._index.extend(orphans)

        if self._index != stored_index or set(self._batches) != set(stored_batches):
            self._persist()

    def add(self, batch: Batch) -> None:
        self._batches[batch.id] = list(batch.events)
        self._persist_batches()
        self._index.append(batch.id)
        self._persist_index()

    def get(self, batch_id: str) -> Batch | None:
        events = self._batches.get(batch_id)
        if events is None:
            return None
        return Batch(id=batch_id, events=list(events))

    def ids(self) -> list[str]:
        return self._index.copy()

    def clear(self, batch_id: str) -> bool:
        self._logger.debug("clear_batch_by_id batchId=%s", batch_id)
        if batch_id not in self._index:
            return False
        self._batches.pop(batch_id, None)
        self._index.remove(batch_id)
        self._persist()
        return True

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, batch_id: object) -> bool:
        return batch_id in self._batches

    def _persist(self) -> None:
        self._persist_index()
        self._persist_batches()

    def _persist_batches(self) -> None:
        self._storage.set(
            StorageKey.BATCHES.value,
            {
                batch_id: [event.to_dict() for event in events]
                for batch_id, events in self._batches.items()
            },
        )

    def _persist_index(self) -> None:
        self._storage.set(StorageKey.BATCH_INDEX.value, self._index.copy())
