"""Durable FIFO of events waiting to be batched."""

import logging
from typing import Protocol

from ..logging_config import get_logger
from ..models import Event
from ..storage import IStorage, StorageKey


class IEventQueue(Protocol):
    """Ordered, durable sequence of pending events."""

    def push(self, event: Event | None) -> int:
        """Append an event and persist. Returns its index, or -1 for None."""
        ...

    def head(self, count: int) -> list[Event]:
        """First ``count`` events, oldest first."""
        ...

    def remove_head(self, count: int) -> None:
        """Drop the first ``count`` events and persist."""
        ...

    def __len__(self) -> int:
        ...


class EventQueue:
    """Event queue mirrored to storage after every mutation."""

    def __init__(self, storage: IStorage, logger: logging.Logger | None = None):
        self._storage = storage
        self._logger = logger or get_logger(__name__)
        self._events: list[Event] = []
        self.restore()

    def restore(self) -> None:
        """Reload the queue from storage, skipping unreadable entries."""
        self._events = []
        for data in self._storage.get(StorageKey.EVENTS.value) or []:
            try:
                self._events.append(Event.from_dict(data))
            except (KeyError, TypeError) as e:
                self._logger.warning("Dropping unreadable stored event: %s", e)

    def push(self, event: Event | None) -> int:
        if event is None:
            return -1
        self._logger.debug("push_event eventType=%s", event.event_type)
        index = len(self._events)
        self._events.append(event)
        self._persist()
        return index

    def head(self, count: int) -> list[Event]:
        return self._events[:count]

    def remove_head(self, count: int) -> None:
        del self._events[:count]
        self._persist()

    def get(self, index: int) -> Event:
        return self._events[index]

    def snapshot(self) -> list[Event]:
        """Copy of all queued events."""
        return self._events.copy()

    def __len__(self) -> int:
        return len(self._events)

    def _persist(self) -> None:
        self._storage.set(
            StorageKey.EVENTS.value, [event.to_dict() for event in self._events]
        )
