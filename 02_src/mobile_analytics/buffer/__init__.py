"""Event queue and batch store module."""

from .batches import BatchStore, IBatchStore
from .queue import EventQueue, IEventQueue

__all__ = ["BatchStore", "IBatchStore", "EventQueue", "IEventQueue"]
