"""Core data models for the analytics client."""

from .batches import Batch
from .context import ClientContext, GlobalDefaults
from .events import (
    EVENT_VERSION,
    MONETIZATION_EVENT_TYPE,
    Event,
    MonetizationDetails,
    Session,
    format_timestamp,
    parse_timestamp,
)

__all__ = [
    # Events
    "EVENT_VERSION",
    "MONETIZATION_EVENT_TYPE",
    "Event",
    "Session",
    "MonetizationDetails",
    "format_timestamp",
    "parse_timestamp",
    # Batches
    "Batch",
    # Context
    "ClientContext",
    "GlobalDefaults",
]
