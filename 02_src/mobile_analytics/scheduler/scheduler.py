"""One-shot timer for automatic submission cycles."""

import asyncio
import logging
from typing import Callable, Protocol

from ..logging_config import get_logger


class IScheduler(Protocol):
    """Re-armable timer."""

    def arm(self, delay: float, callback: Callable[[], object]) -> None:
        """Run ``callback`` after ``delay`` seconds, replacing any pending timer."""
        ...

    def cancel(self) -> None:
        """Cancel the pending timer, if any."""
        ...


class Scheduler:
    """Holds at most one pending timer on the running event loop."""

    def __init__(self, logger: logging.Logger | None = None):
        self._handle: asyncio.TimerHandle | None = None
        self._logger = logger or get_logger(__name__)

    @property
    def armed(self) -> bool:
        return self._handle is not None and not self._handle.cancelled()

    def arm(self, delay: float, callback: Callable[[], object]) -> None:
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.warning("No running event loop, automatic submission not scheduled")
            return
        self._handle = loop.call_later(delay, self._fire, callback)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[[], object]) -> None:
        self._handle = None
        try:
            callback()
        except Exception as e:
            self._logger.error("Scheduled submission failed: %s", e, exc_info=True)
