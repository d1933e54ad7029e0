"""Partitions the event queue into size-bounded, stored batches."""

import logging
from typing import Callable, Sequence

from ..buffer import IBatchStore, IEventQueue
from ..config import DEFAULT_BATCH_SIZE_LIMIT
from ..errors import OversizeBatchError
from ..logging_config import get_logger
from ..models import Batch, Event
from ..utils import SizeEstimator, estimate_serialized_size, generate_id

HARD_BATCH_SIZE_LIMIT = 512000  # bytes; largest request the service accepts


class Batcher:
    """Turns the head of the queue into batches no larger than the ceiling."""

    def __init__(
        self,
        batch_size_limit: int = DEFAULT_BATCH_SIZE_LIMIT,
        size_estimator: SizeEstimator = estimate_serialized_size,
        id_generator: Callable[[], str] = generate_id,
        logger: logging.Logger | None = None,
    ):
        self.batch_size_limit = batch_size_limit
        self._size = size_estimator
        self._generate_id = id_generator
        self._logger = logger or get_logger(__name__)

    def next_batch_size(self, events: Sequence[Event]) -> int:
        """Length of the longest prefix of ``events`` that fits the ceiling.

        Probes downward one event at a time; never returns less than 1 for a
        non-empty sequence.
        """
        last_index = len(events)
        while last_index > 1 and self._size(events[:last_index]) > self.batch_size_limit:
            last_index -= 1
        return last_index

    def make_batch(self, events: Sequence[Event]) -> Batch:
        """Wrap ``events`` in a new batch, refusing anything over the hard cap."""
        size = self._size(events)
        if size >= HARD_BATCH_SIZE_LIMIT:
            raise OversizeBatchError(size, HARD_BATCH_SIZE_LIMIT, len(events))
        return Batch(id=self._generate_id(), events=list(events))

    def drain(self, queue: IEventQueue, store: IBatchStore) -> list[str]:
        """Move queued events into stored batches until the queue is empty.

        Stops early, leaving the events queued, when a batch would exceed the
        hard cap. Returns the ids of the batches created.
        """
        created: list[str] = []
        while len(queue) > 0:
            self._logger.debug("%s events to be submitted", len(queue))
            pending = queue.head(len(queue))
            count = self.next_batch_size(pending)
            self._logger.debug("%s events in batch", count)

            try:
                batch = self.make_batch(pending[:count])
            except OversizeBatchError as e:
                self._logger.error(str(e))
                break

            # Batch and index are stored before the events leave the queue
            store.add(batch)
            queue.remove_head(count)
            created.append(batch.id)
        return created
