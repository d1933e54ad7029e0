"""Event-related data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

EVENT_VERSION = "v2.0"
MONETIZATION_EVENT_TYPE = "_monetization.purchase"


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z``."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(moment: datetime) -> str:
    """Format as ``2014-06-30T19:07:47.885Z``."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Session:
    """The session an event belongs to. Required on every event."""

    id: str
    start_timestamp: str
    stop_timestamp: str | None = None
    duration: int | None = None  # ms, set when stop_timestamp is known

    def to_dict(self) -> dict:
        data: dict[str, Any] = {
            "id": self.id,
            "startTimestamp": self.start_timestamp,
        }
        if self.stop_timestamp:
            data["stopTimestamp"] = self.stop_timestamp
        if self.duration is not None:
            data["duration"] = self.duration
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        return cls(
            id=data["id"],
            start_timestamp=data["startTimestamp"],
            stop_timestamp=data.get("stopTimestamp"),
            duration=data.get("duration"),
        )


@dataclass
class Event:
    """A single recorded occurrence in the app."""

    event_type: str
    timestamp: str
    session: Session
    version: str = EVENT_VERSION
    attributes: dict[str, Any] = field(default_factory=dict)
    metrics: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Wire and storage representation."""
        return {
            "eventType": self.event_type,
            "timestamp": self.timestamp,
            "session": self.session.to_dict(),
            "version": self.version,
            "attributes": dict(self.attributes),
            "metrics": dict(self.metrics),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        return cls(
            event_type=data["eventType"],
            timestamp=data["timestamp"],
            session=Session.from_dict(data["session"]),
            version=data.get("version", EVENT_VERSION),
            attributes=dict(data.get("attributes") or {}),
            metrics=dict(data.get("metrics") or {}),
        )


@dataclass
class MonetizationDetails:
    """Purchase details for a ``_monetization.purchase`` event.

    ``price`` is either a number (paired with ``currency``) or an already
    formatted string such as ``"9.99 USD"``.
    """

    currency: str | None = None
    product_id: str | None = None
    quantity: int | float | None = None
    price: int | float | str | None = None
