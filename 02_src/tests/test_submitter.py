"""Tests for Submitter and the retry policy."""

from unittest.mock import AsyncMock, Mock

import pytest

from mobile_analytics.buffer import BatchStore
from mobile_analytics.errors import (
    PermanentSubmissionError,
    TransientSubmissionError,
    TransportError,
)
from mobile_analytics.models import Batch, ClientContext
from mobile_analytics.submission import Submitter, is_retryable


@pytest.fixture
def context():
    return ClientContext(
        client={"client_id": "c1"},
        env={"platform": "Android"},
        services={"mobile_analytics": {"app_id": "app-123"}},
    )


@pytest.fixture
def store(storage, make_event):
    st = BatchStore(storage)
    st.add(Batch(id="b1", events=[make_event("first")]))
    st.add(Batch(id="b2", events=[make_event("second")]))
    return st


class TestIsRetryable:
    """Retry policy table."""

    @pytest.mark.parametrize(
        "status_code, code, expected",
        [
            (None, None, True),
            (None, "ValidationException", True),
            (None, "ConnectError", True),
            (400, "ValidationException", False),
            (400, "BadRequestException", False),
            (400, "SerializationException", False),
            (400, "OtherException", True),
            (400, None, True),
            (500, None, False),
            (500, "InternalFailure", False),
            (403, "AccessDeniedException", False),
        ],
    )
    def test_policy(self, status_code, code, expected):
        error = TransportError("boom", status_code=status_code, code=code)
        assert is_retryable(error) is expected

    def test_plain_exception_is_retryable(self):
        """Test errors without a status code are retried."""
        assert is_retryable(RuntimeError("socket closed")) is True


class TestSubmitAllBatches:
    """Tests for Submitter.submit_all_batches()."""

    async def test_submits_oldest_first(self, store, context, mock_transport):
        """Test every batch goes to the transport in index order."""
        submitter = Submitter(store, mock_transport, context)

        ids = submitter.submit_all_batches()
        await submitter.wait_pending()

        assert ids == ["b1", "b2"]
        sent = [call.args[0][0]["eventType"] for call in mock_transport.put_events.call_args_list]
        assert sent == ["first", "second"]

    async def test_does_not_wait(self, store, context, mock_transport):
        """Test submission returns before the transport completes."""
        submitter = Submitter(store, mock_transport, context)

        submitter.submit_all_batches()

        assert submitter.pending_count == 2
        mock_transport.put_events.assert_not_called()
        await submitter.wait_pending()
        assert submitter.pending_count == 0

    async def test_payload_carries_serialized_context(self, store, context, mock_transport):
        """Test the client context is sent as a JSON string."""
        submitter = Submitter(store, mock_transport, context)

        submitter.submit_batch_by_id("b1")
        await submitter.wait_pending()

        events, client_context = mock_transport.put_events.call_args.args
        assert events[0]["version"] == "v2.0"
        assert client_context == context.serialize()

    async def test_context_override(self, store, context, mock_transport):
        """Test a per-call context replaces the default."""
        override = ClientContext(client={"client_id": "other"}, env={}, services={})
        submitter = Submitter(store, mock_transport, context)

        submitter.submit_batch_by_id("b1", client_context=override)
        await submitter.wait_pending()

        assert mock_transport.put_events.call_args.args[1] == override.serialize()


class TestOutcomes:
    """Success and failure handling."""

    async def submit_one(self, store, context, error=None, data=None):
        transport = Mock()
        transport.put_events = AsyncMock(side_effect=error, return_value=data)
        calls = []
        submitter = Submitter(
            store,
            transport,
            context,
            submit_callback=lambda err, d, batch_id: calls.append((err, d, batch_id)),
        )
        submitter.submit_batch_by_id("b1")
        await submitter.wait_pending()
        return calls

    async def test_success_clears_batch(self, store, context):
        calls = await self.submit_one(store, context, data={"ok": True})

        assert calls == [(None, {"ok": True}, "b1")]
        assert store.ids() == ["b2"]

    @pytest.mark.parametrize(
        "status_code, code",
        [(None, None), (None, "ValidationException"), (400, "OtherException")],
    )
    async def test_transient_failure_keeps_batch(self, store, context, status_code, code):
        calls = await self.submit_one(
            store, context, error=TransportError("boom", status_code, code)
        )

        error, data, batch_id = calls[0]
        assert isinstance(error, TransientSubmissionError)
        assert error.status_code == status_code
        assert error.code == code
        assert batch_id == "b1"
        assert store.ids() == ["b1", "b2"]

    @pytest.mark.parametrize(
        "status_code, code",
        [(400, "ValidationException"), (500, None), (500, "OtherException")],
    )
    async def test_permanent_failure_clears_batch(self, store, context, status_code, code):
        calls = await self.submit_one(
            store, context, error=TransportError("boom", status_code, code)
        )

        error = calls[0][0]
        assert isinstance(error, PermanentSubmissionError)
        assert isinstance(error.__cause__, TransportError)
        assert store.ids() == ["b2"]

    async def test_callback_error_does_not_block_clear(self, store, context, mock_transport):
        """Test a raising callback is logged and the batch still cleared."""

        def bad_callback(err, data, batch_id):
            raise ValueError("callback bug")

        submitter = Submitter(store, mock_transport, context, submit_callback=bad_callback)
        submitter.submit_batch_by_id("b1")
        await submitter.wait_pending()

        assert store.ids() == ["b2"]

    async def test_cleared_batch_skipped(self, store, context, mock_transport):
        """Test a batch cleared before its task runs is not sent."""
        submitter = Submitter(store, mock_transport, context)

        submitter.submit_batch_by_id("b1")
        store.clear("b1")
        await submitter.wait_pending()

        mock_transport.put_events.assert_not_called()

    def test_no_running_loop(self, store, context, mock_transport):
        """Test submission outside a loop keeps the batch and returns None."""
        submitter = Submitter(store, mock_transport, context)

        assert submitter.submit_batch_by_id("b1") is None
        assert store.ids() == ["b1", "b2"]
