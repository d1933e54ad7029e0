"""Batch data model."""

from dataclasses import dataclass, field

from .events import Event


@dataclass
class Batch:
    """A stored, size-bounded group of events awaiting submission."""

    id: str
    events: list[Event] = field(default_factory=list)
