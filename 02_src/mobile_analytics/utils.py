"""Payload sizing, JSON encoding and id helpers."""

import json
import uuid
from typing import Any, Callable, Sequence

SizeEstimator = Callable[[Sequence[Any]], int]


def _as_wire(item: Any) -> Any:
    to_dict = getattr(item, "to_dict", None)
    return to_dict() if callable(to_dict) else item


def dumps_json(value: Any, compact: bool = False) -> str:
    """Encode ``value`` as JSON; anything json can't encode is sent as ``str()``.

    Attribute values the factory could not stringify stay on the event, so
    every encoding of events goes through here.
    """
    if compact:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return json.dumps(value, default=str)


def estimate_serialized_size(events: Sequence[Any]) -> int:
    """Bytes taken by ``events`` as a compact UTF-8 JSON array.

    Never decreases when an event is appended.
    """
    body = dumps_json([_as_wire(event) for event in events], compact=True)
    return len(body.encode("utf-8"))


def generate_id() -> str:
    """Globally unique id for batches and installations."""
    return str(uuid.uuid4())
