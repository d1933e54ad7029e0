"""Submits stored batches and reconciles them with the service's answer."""

import asyncio
import logging
from typing import Any, Protocol

from ..buffer import IBatchStore
from ..config import SubmitCallback
from ..errors import PermanentSubmissionError, TransientSubmissionError
from ..logging_config import get_logger
from ..models import ClientContext
from ..transport import ITransport

NON_RETRYABLE_EXCEPTIONS = frozenset(
    {"BadRequestException", "SerializationException", "ValidationException"}
)


def is_retryable(error: BaseException) -> bool:
    """Whether a failed batch should be kept for the next cycle.

    No status code (network failure) is retried. A 400 is retried unless it
    carries one of NON_RETRYABLE_EXCEPTIONS. Every other status is final.
    """
    status_code = getattr(error, "status_code", None)
    if status_code is None:
        return True
    if status_code == 400:
        return getattr(error, "code", None) not in NON_RETRYABLE_EXCEPTIONS
    return False


def _noop_callback(error: Exception | None, data: Any, batch_id: str) -> None:
    return None


class ISubmitter(Protocol):
    """Sending batches to the transport."""

    def submit_all_batches(
        self,
        client_context: ClientContext | None = None,
        submit_callback: SubmitCallback | None = None,
    ) -> list[str]:
        """Dispatch every pending batch, oldest first. Does not wait."""
        ...

    def submit_batch_by_id(
        self,
        batch_id: str,
        client_context: ClientContext | None = None,
        submit_callback: SubmitCallback | None = None,
    ) -> asyncio.Task | None:
        """Dispatch one batch. Does not wait."""
        ...

    async def wait_pending(self) -> None:
        """Wait for every dispatched submission to finish."""
        ...


class Submitter:
    """Fire-and-forget batch submission on the running event loop."""

    def __init__(
        self,
        store: IBatchStore,
        transport: ITransport,
        client_context: ClientContext,
        submit_callback: SubmitCallback | None = None,
        logger: logging.Logger | None = None,
    ):
        self._store = store
        self._transport = transport
        self._client_context = client_context
        self._submit_callback = submit_callback or _noop_callback
        self._logger = logger or get_logger(__name__)
        self._pending: set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def submit_all_batches(
        self,
        client_context: ClientContext | None = None,
        submit_callback: SubmitCallback | None = None,
    ) -> list[str]:
        self._logger.debug("submit_all_batches: %s batch(es)", len(self._store))
        batch_ids = []
        for batch_id in self._store.ids():
            self.submit_batch_by_id(batch_id, client_context, submit_callback)
            batch_ids.append(batch_id)
        return batch_ids

    def submit_batch_by_id(
        self,
        batch_id: str,
        client_context: ClientContext | None = None,
        submit_callback: SubmitCallback | None = None,
    ) -> asyncio.Task | None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._logger.error(
                "Cannot submit batch %s: no running event loop, kept for retry", batch_id
            )
            return None

        task = loop.create_task(
            self._submit(
                batch_id,
                client_context or self._client_context,
                submit_callback or self._submit_callback,
            )
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _submit(
        self,
        batch_id: str,
        client_context: ClientContext,
        submit_callback: SubmitCallback,
    ) -> None:
        batch = self._store.get(batch_id)
        if batch is None:
            self._logger.debug("Batch %s already cleared, skipping", batch_id)
            return

        error: Exception | None = None
        data: Any = None
        clear_batch = True
        try:
            data = await self._transport.put_events(
                [event.to_dict() for event in batch.events],
                client_context.serialize(),
            )
        except Exception as e:
            if is_retryable(e):
                error = TransientSubmissionError(batch_id, e)
                clear_batch = False
            else:
                error = PermanentSubmissionError(batch_id, e)
            error.__cause__ = e

        try:
            submit_callback(error, data, batch_id)
        except Exception as e:
            self._logger.error("Submit callback raised for batch %s: %s", batch_id, e, exc_info=True)

        if error is not None:
            self._logger.error(
                "%s (status=%s, code=%s, retry=%s)",
                error,
                error.status_code,
                error.code,
                not clear_batch,
                extra={"context": {"batch_id": batch_id}},
            )
        else:
            self._logger.info(
                "Events Submitted Successfully",
                extra={"context": {"batch_id": batch_id, "event_count": len(batch.events)}},
            )

        if clear_batch:
            self._store.clear(batch_id)

    async def wait_pending(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
