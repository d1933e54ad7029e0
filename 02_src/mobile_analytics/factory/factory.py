"""Builds well-formed events from call-site fields and global defaults."""

import json
import logging
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Callable, Protocol

from ..logging_config import get_logger
from ..models import (
    EVENT_VERSION,
    MONETIZATION_EVENT_TYPE,
    Event,
    GlobalDefaults,
    MonetizationDetails,
    Session,
    format_timestamp,
    parse_timestamp,
)
from ..validation import EventValidator, IEventValidator


class IEventFactory(Protocol):
    """Creating validated events."""

    def create_event(
        self,
        event_type: str,
        session: Session,
        attributes: dict[str, Any] | None = None,
        metrics: dict[str, Any] | None = None,
    ) -> Event | None:
        """Build an event and validate it. None when validation fails."""
        ...


def session_duration(start_timestamp: str, stop_timestamp: str) -> int:
    """Milliseconds between two ISO-8601 timestamps."""
    delta = parse_timestamp(stop_timestamp) - parse_timestamp(start_timestamp)
    return int(delta.total_seconds() * 1000)


def merge_defaults(values: dict[str, Any], defaults: dict[str, Any]) -> dict[str, Any]:
    """Fill keys missing from ``values`` with ``defaults``; present keys win."""
    merged = dict(values)
    for name, value in defaults.items():
        merged.setdefault(name, value)
    return merged


def monetization_fields(
    details: MonetizationDetails,
    attributes: dict[str, Any] | None = None,
    metrics: dict[str, Any] | None = None,
) -> tuple[dict[str, Any], dict[str, Any]]:
    """Attributes and metrics for a purchase event.

    A numeric price becomes the ``_item_price`` metric; anything else is sent
    as the ``_item_price_formatted`` attribute.
    """
    attributes = dict(attributes or {})
    metrics = dict(metrics or {})

    attributes["_currency"] = details.currency or attributes.get("_currency")
    attributes["_product_id"] = details.product_id or attributes.get("_product_id")
    metrics["_quantity"] = details.quantity or metrics.get("_quantity")

    price = details.price
    if isinstance(price, Real) and not isinstance(price, bool):
        metrics["_item_price"] = price or metrics.get("_item_price")
    else:
        attributes["_item_price_formatted"] = price or attributes.get(
            "_item_price_formatted"
        )

    # Unset fields are left out rather than sent as nulls
    attributes = {name: value for name, value in attributes.items() if value is not None}
    metrics = {name: value for name, value in metrics.items() if value is not None}
    return attributes, metrics


class EventFactory:
    """Creates events stamped with time, session and global defaults."""

    def __init__(
        self,
        defaults: GlobalDefaults | None = None,
        validator: IEventValidator | None = None,
        clock: Callable[[], datetime] | None = None,
        logger: logging.Logger | None = None,
    ):
        self._defaults = defaults or GlobalDefaults()
        self._logger = logger or get_logger(__name__)
        self._validator = validator or EventValidator(logger=self._logger)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def defaults(self) -> GlobalDefaults:
        return self._defaults

    def create_event(
        self,
        event_type: str,
        session: Session,
        attributes: dict[str, Any] | None = None,
        metrics: dict[str, Any] | None = None,
    ) -> Event | None:
        """Build an event and run it through the validator."""
        self._logger.debug(
            "create_event eventType=%s session=%s attributes=%s metrics=%s",
            event_type,
            session.id,
            attributes,
            metrics,
        )
        attributes = merge_defaults(attributes or {}, self._defaults.attributes)
        metrics = merge_defaults(metrics or {}, self._defaults.metrics)

        for name, value in attributes.items():
            if isinstance(value, str):
                continue
            try:
                attributes[name] = json.dumps(value)
            except (TypeError, ValueError):
                self._logger.warning("Error parsing attribute %s", name)

        event_session = Session(id=session.id, start_timestamp=session.start_timestamp)
        if session.stop_timestamp:
            event_session.stop_timestamp = session.stop_timestamp
            try:
                event_session.duration = session_duration(
                    session.start_timestamp, session.stop_timestamp
                )
            except (TypeError, ValueError):
                self._logger.warning(
                    "Cannot compute duration for session %s", session.id
                )

        event = Event(
            event_type=event_type,
            timestamp=format_timestamp(self._clock()),
            session=event_session,
            version=EVENT_VERSION,
            attributes=attributes,
            metrics=metrics,
        )
        return self._validator.validate(event)

    def create_monetization_event(
        self,
        session: Session,
        details: MonetizationDetails,
        attributes: dict[str, Any] | None = None,
        metrics: dict[str, Any] | None = None,
    ) -> Event | None:
        """Build a ``_monetization.purchase`` event."""
        attributes, metrics = monetization_fields(details, attributes, metrics)
        return self.create_event(MONETIZATION_EVENT_TYPE, session, attributes, metrics)
