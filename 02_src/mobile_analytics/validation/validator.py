"""Event schema and size validation."""

import logging
from numbers import Real
from typing import Protocol

from ..errors import ValidationError
from ..logging_config import get_logger
from ..models import EVENT_VERSION, Event

MAX_ATTRIBUTES_AND_METRICS = 40
MAX_NAME_LENGTH = 50
MAX_ATTRIBUTE_VALUE_LENGTH = 200


def _is_numeric(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _bad_name(name: object) -> bool:
    return not isinstance(name, str) or not 1 <= len(name) <= MAX_NAME_LENGTH


class IEventValidator(Protocol):
    """Per-event schema and size rules."""

    def validate(self, event: Event) -> Event | None:
        """Return the event unchanged, or None when a rule is broken."""
        ...


class EventValidator:
    """Checks events against the service limits.

    Rules run in a fixed order and the first broken rule is the one reported.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._logger = logger or get_logger(__name__)

    def validate(self, event: Event) -> Event | None:
        """Return ``event`` if valid, else log the broken rule and return None."""
        try:
            self.check(event)
        except ValidationError as e:
            self._logger.error(str(e))
            return None
        return event

    def check(self, event: Event) -> None:
        """Raise ValidationError for the first broken rule."""
        if event.version != EVENT_VERSION:
            raise ValidationError(f"Event must have version {EVENT_VERSION}")

        if not isinstance(event.event_type, str):
            raise ValidationError("Event Type must be a string")

        invalid_metrics = [
            name for name, value in event.metrics.items() if not _is_numeric(value)
        ]
        if invalid_metrics:
            raise ValidationError(f"Event Metrics must be numeric ({invalid_metrics[0]})")

        if len(event.metrics) + len(event.attributes) > MAX_ATTRIBUTES_AND_METRICS:
            raise ValidationError(
                f"Event Metric and Attribute Count cannot exceed {MAX_ATTRIBUTES_AND_METRICS}"
            )

        if any(_bad_name(name) for name in event.attributes):
            raise ValidationError(
                f"Event Attribute names must be 1-{MAX_NAME_LENGTH} characters"
            )

        if any(_bad_name(name) for name in event.metrics):
            raise ValidationError(
                f"Event Metric names must be 1-{MAX_NAME_LENGTH} characters"
            )

        too_long = [
            name
            for name, value in event.attributes.items()
            if isinstance(value, str) and len(value) > MAX_ATTRIBUTE_VALUE_LENGTH
        ]
        if too_long:
            raise ValidationError(
                "Event Attribute values cannot be longer than "
                f"{MAX_ATTRIBUTE_VALUE_LENGTH} characters ({too_long[0]})"
            )
