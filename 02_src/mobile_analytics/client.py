"""Analytics client: records events and submits them in batches."""

import logging
import time
from typing import Any, Callable

from .batching import HARD_BATCH_SIZE_LIMIT, Batcher
from .buffer import BatchStore, EventQueue
from .config import ClientOptions, SubmitCallback
from .errors import ConfigurationError
from .factory import EventFactory, merge_defaults
from .logging_config import get_logger
from .models import ClientContext, Event, GlobalDefaults, MonetizationDetails, Session
from .scheduler import Scheduler
from .storage import IStorage, SqliteStorage, StorageKey
from .submission import Submitter
from .transport import HttpTransport, ITransport
from .utils import SizeEstimator, estimate_serialized_size, generate_id

SUBMIT_DEBOUNCE_SECONDS = 1.0


class AnalyticsClient:
    """Buffers events durably and submits them to the analytics service.

    Call :meth:`start` from a running event loop before recording. Recording
    and submission are synchronous and never wait for the network; outcomes
    are reported through ``submit_callback``.
    """

    def __init__(
        self,
        options: ClientOptions,
        storage: IStorage | None = None,
        transport: ITransport | None = None,
        logger: logging.Logger | None = None,
        size_estimator: SizeEstimator = estimate_serialized_size,
        id_generator: Callable[[], str] = generate_id,
    ):
        # Components log through their own module loggers unless one is injected
        self._component_logger = logger
        self._logger = logger or get_logger(__name__)
        self._logger.debug("AnalyticsClient options: %s", options)

        if not options.app_id:
            raise ConfigurationError("AnalyticsClient must be initialized with an app_id")
        if options.platform is None:
            self._logger.error("AnalyticsClient must be initialized with a platform")
        if options.batch_size_limit >= HARD_BATCH_SIZE_LIMIT:
            self._logger.warning(
                "batch_size_limit %s is not below the %s byte request limit; "
                "oversized batches will stay queued",
                options.batch_size_limit,
                HARD_BATCH_SIZE_LIMIT,
            )

        self.options = options
        self._size = size_estimator
        self._id_generator = id_generator

        self._owns_storage = storage is None
        self._storage: IStorage = storage or SqliteStorage()
        self._owns_transport = transport is None
        self._transport: ITransport = transport or HttpTransport(
            endpoint=options.endpoint,
            api_version=options.api_version,
            timeout=options.request_timeout,
        )

        # Components (will be initialized in start())
        self._client_context: ClientContext | None = None
        self._queue: EventQueue | None = None
        self._batches: BatchStore | None = None
        self._factory: EventFactory | None = None
        self._batcher: Batcher | None = None
        self._submitter: Submitter | None = None
        self._scheduler = Scheduler(logger=logger)
        self._last_submit_time: float | None = None
        self._started = False

    async def start(self) -> None:
        """Restore persisted state and run a first submission cycle."""
        if self._started:
            return
        self._logger.info("Starting analytics client for app %s", self.options.app_id)

        # 1. Storage
        if self._owns_storage and isinstance(self._storage, SqliteStorage):
            await self._storage.init()

        # 2. Global defaults; configured values win over persisted ones
        defaults = GlobalDefaults(
            attributes=self._merge_persisted(
                StorageKey.GLOBAL_ATTRIBUTES, self.options.global_attributes
            ),
            metrics=self._merge_persisted(
                StorageKey.GLOBAL_METRICS, self.options.global_metrics
            ),
        )

        # 3. Client context
        if self.options.client_context is not None:
            self._client_context = ClientContext.from_dict(self.options.client_context)
        else:
            self._client_context = ClientContext.from_options(
                self.options, self._resolve_client_id()
            )

        # 4. Queue, batches and the submission pipeline
        self._queue = EventQueue(self._storage, logger=self._component_logger)
        self._batches = BatchStore(self._storage, logger=self._component_logger)
        self._factory = EventFactory(defaults, logger=self._component_logger)
        self._batcher = Batcher(
            batch_size_limit=self.options.batch_size_limit,
            size_estimator=self._size,
            id_generator=self._id_generator,
            logger=self._component_logger,
        )
        self._submitter = Submitter(
            self._batches,
            self._transport,
            self._client_context,
            submit_callback=self.options.submit_callback,
            logger=self._component_logger,
        )
        self._started = True
        self._logger.info(
            "Restored %s queued event(s) and %s pending batch(es)",
            len(self._queue),
            len(self._batches),
        )

        # 5. Submit whatever a previous run left behind
        self.submit_events()

    async def stop(self) -> None:
        """Stop the timer, wait for in-flight submissions, release resources."""
        self._scheduler.cancel()
        if self._submitter:
            await self._submitter.wait_pending()
        if self._owns_transport and isinstance(self._transport, HttpTransport):
            await self._transport.aclose()
        if self._owns_storage and isinstance(self._storage, SqliteStorage):
            await self._storage.close()
            self._logger.info("Storage closed")
        self._started = False

    def _merge_persisted(self, key: StorageKey, configured: dict[str, Any]) -> dict[str, Any]:
        merged = merge_defaults(configured, self._storage.get(key.value) or {})
        self._storage.set(key.value, merged)
        return merged

    def _resolve_client_id(self) -> str:
        if self.options.client_id:
            return self.options.client_id
        client_id = self._storage.get(StorageKey.CLIENT_ID.value)
        if not client_id:
            client_id = self._id_generator()
            self._storage.set(StorageKey.CLIENT_ID.value, client_id)
        return client_id

    def _require_started(self) -> None:
        if not self._started:
            raise RuntimeError("AnalyticsClient not started")

    # Recording

    def create_event(
        self,
        event_type: str,
        session: Session,
        attributes: dict[str, Any] | None = None,
        metrics: dict[str, Any] | None = None,
    ) -> Event | None:
        """Build and validate an event without queueing it."""
        self._require_started()
        return self.factory.create_event(event_type, session, attributes, metrics)

    def create_monetization_event(
        self,
        session: Session,
        details: MonetizationDetails,
        attributes: dict[str, Any] | None = None,
        metrics: dict[str, Any] | None = None,
    ) -> Event | None:
        """Build and validate a purchase event without queueing it."""
        self._require_started()
        return self.factory.create_monetization_event(session, details, attributes, metrics)

    def push_event(self, event: Event | None) -> int:
        """Queue an already created event. Returns its index, -1 for None."""
        self._require_started()
        return self.queue.push(event)

    def record_event(
        self,
        event_type: str,
        session: Session,
        attributes: dict[str, Any] | None = None,
        metrics: dict[str, Any] | None = None,
    ) -> Event | None:
        """Create and queue an event; submit at once if the queue is full.

        Returns the recorded event, or None when it failed validation.
        """
        event = self.create_event(event_type, session, attributes, metrics)
        return self._record(event)

    def record_monetization_event(
        self,
        session: Session,
        details: MonetizationDetails,
        attributes: dict[str, Any] | None = None,
        metrics: dict[str, Any] | None = None,
    ) -> Event | None:
        """Record a ``_monetization.purchase`` event."""
        event = self.create_monetization_event(session, details, attributes, metrics)
        return self._record(event)

    def _record(self, event: Event | None) -> Event | None:
        if event is None:
            return None
        self.queue.push(event)
        if self._size(self.queue.snapshot()) >= self.options.batch_size_limit:
            self.submit_events()
        return event

    # Submission

    def submit_events(
        self,
        client_context: ClientContext | dict | None = None,
        submit_callback: SubmitCallback | None = None,
    ) -> list[str]:
        """Batch every queued event and submit all pending batches.

        Returns the ids of the batches handed to the transport, or an empty
        list when called again within a second of the previous cycle.
        """
        self._require_started()
        now = time.monotonic()
        if (
            self._last_submit_time is not None
            and now - self._last_submit_time < SUBMIT_DEBOUNCE_SECONDS
        ):
            self._logger.warning("Prevented multiple submissions in under a second")
            return []
        self._last_submit_time = now

        if self.options.auto_submit_events:
            self._scheduler.arm(self.options.auto_submit_interval, self.submit_events)

        self.batcher.drain(self.queue, self.batches)
        return self.submit_all_batches(client_context, submit_callback)

    def submit_all_batches(
        self,
        client_context: ClientContext | dict | None = None,
        submit_callback: SubmitCallback | None = None,
    ) -> list[str]:
        """Submit every stored batch, oldest first, without waiting."""
        self._require_started()
        return self.submitter.submit_all_batches(
            self._as_context(client_context), submit_callback
        )

    def submit_batch_by_id(
        self,
        batch_id: str,
        client_context: ClientContext | dict | None = None,
        submit_callback: SubmitCallback | None = None,
    ) -> None:
        """Submit a single stored batch without waiting."""
        self._require_started()
        self.submitter.submit_batch_by_id(
            batch_id, self._as_context(client_context), submit_callback
        )

    def clear_batch_by_id(self, batch_id: str) -> None:
        """Forget a stored batch. No-op for unknown ids."""
        self._require_started()
        self.batches.clear(batch_id)

    async def wait_for_submissions(self) -> None:
        """Wait until every dispatched submission has completed."""
        self._require_started()
        await self.submitter.wait_pending()

    @staticmethod
    def _as_context(client_context: ClientContext | dict | None) -> ClientContext | None:
        if isinstance(client_context, dict):
            return ClientContext.from_dict(client_context)
        return client_context

    @property
    def client_context(self) -> ClientContext:
        """Get the default client context."""
        if self._client_context is None:
            raise RuntimeError("AnalyticsClient not started")
        return self._client_context

    @property
    def queue(self) -> EventQueue:
        """Get the event queue."""
        if self._queue is None:
            raise RuntimeError("AnalyticsClient not started")
        return self._queue

    @property
    def batches(self) -> BatchStore:
        """Get the batch store."""
        if self._batches is None:
            raise RuntimeError("AnalyticsClient not started")
        return self._batches

    @property
    def factory(self) -> EventFactory:
        if self._factory is None:
            raise RuntimeError("AnalyticsClient not started")
        return self._factory

    @property
    def batcher(self) -> Batcher:
        if self._batcher is None:
            raise RuntimeError("AnalyticsClient not started")
        return self._batcher

    @property
    def submitter(self) -> Submitter:
        if self._submitter is None:
            raise RuntimeError("AnalyticsClient not started")
        return self._submitter

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler
