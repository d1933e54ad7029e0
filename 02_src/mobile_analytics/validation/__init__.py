"""Validation module."""

from .validator import (
    MAX_ATTRIBUTE_VALUE_LENGTH,
    MAX_ATTRIBUTES_AND_METRICS,
    MAX_NAME_LENGTH,
    EventValidator,
    IEventValidator,
)

__all__ = [
    "EventValidator",
    "IEventValidator",
    "MAX_ATTRIBUTES_AND_METRICS",
    "MAX_NAME_LENGTH",
    "MAX_ATTRIBUTE_VALUE_LENGTH",
]
