"""Buffered, batched event submission for a mobile analytics service."""

import logging

from .batching import HARD_BATCH_SIZE_LIMIT, Batcher
from .buffer import BatchStore, EventQueue, IBatchStore, IEventQueue
from .client import AnalyticsClient
from .config import ClientOptions
from .errors import (
    AnalyticsError,
    ConfigurationError,
    OversizeBatchError,
    PermanentSubmissionError,
    SubmissionError,
    TransientSubmissionError,
    TransportError,
    ValidationError,
)
from .factory import EventFactory, IEventFactory
from .logging_config import setup_logging
from .models import (
    Batch,
    ClientContext,
    Event,
    GlobalDefaults,
    MonetizationDetails,
    Session,
)
from .scheduler import IScheduler, Scheduler
from .storage import IStorage, MemoryStorage, SqliteStorage, StorageKey
from .submission import NON_RETRYABLE_EXCEPTIONS, ISubmitter, Submitter, is_retryable
from .transport import HttpTransport, ITransport
from .validation import EventValidator, IEventValidator

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Client
    "AnalyticsClient",
    "ClientOptions",
    "setup_logging",
    # Models
    "Session",
    "Event",
    "Batch",
    "MonetizationDetails",
    "ClientContext",
    "GlobalDefaults",
    # Components
    "IStorage",
    "MemoryStorage",
    "SqliteStorage",
    "StorageKey",
    "IEventValidator",
    "EventValidator",
    "IEventFactory",
    "EventFactory",
    "IEventQueue",
    "EventQueue",
    "IBatchStore",
    "BatchStore",
    "Batcher",
    "HARD_BATCH_SIZE_LIMIT",
    "ITransport",
    "HttpTransport",
    "ISubmitter",
    "Submitter",
    "NON_RETRYABLE_EXCEPTIONS",
    "is_retryable",
    "IScheduler",
    "Scheduler",
    # Errors
    "AnalyticsError",
    "ConfigurationError",
    "ValidationError",
    "OversizeBatchError",
    "TransportError",
    "SubmissionError",
    "TransientSubmissionError",
    "PermanentSubmissionError",
]
