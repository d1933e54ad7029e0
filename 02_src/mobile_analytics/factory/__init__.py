"""Event factory module."""

from .factory import (
    EventFactory,
    IEventFactory,
    merge_defaults,
    monetization_fields,
    session_duration,
)

__all__ = [
    "EventFactory",
    "IEventFactory",
    "merge_defaults",
    "monetization_fields",
    "session_duration",
]
