"""Pytest configuration and fixtures."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest
import pytest_asyncio

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def storage():
    """Create in-memory storage for testing."""
    from mobile_analytics.storage import MemoryStorage

    return MemoryStorage()


@pytest_asyncio.fixture
async def sqlite_storage(tmp_path):
    """Create SQLite storage in a temporary directory."""
    from mobile_analytics.storage import SqliteStorage

    st = SqliteStorage(tmp_path / "analytics.db")
    await st.init()
    yield st
    await st.close()


@pytest.fixture
def session():
    """A running session."""
    from mobile_analytics.models import Session

    return Session(id="session-1", start_timestamp="2024-01-01T12:00:00.000Z")


@pytest.fixture
def mock_transport():
    """Create mock transport that accepts every batch."""
    transport = Mock()
    transport.put_events = AsyncMock(return_value=None)
    return transport


@pytest.fixture
def options():
    """Client options with automatic submission disabled."""
    from mobile_analytics.config import ClientOptions

    return ClientOptions(
        app_id="app-123",
        platform="Android",
        auto_submit_events=False,
        client_id="client-abc",
    )


@pytest.fixture
def submit_calls():
    """Collects (error, data, batch_id) tuples passed to the submit callback."""
    return []


@pytest_asyncio.fixture
async def client(options, storage, mock_transport, submit_calls):
    """Create a started AnalyticsClient over memory storage and a mock transport."""
    from mobile_analytics.client import AnalyticsClient

    options.submit_callback = lambda error, data, batch_id: submit_calls.append(
        (error, data, batch_id)
    )
    c = AnalyticsClient(options, storage=storage, transport=mock_transport)
    await c.start()
    # start() runs a submission cycle; let each test trigger its own
    c._last_submit_time = None
    yield c
    await c.stop()


@pytest.fixture
def make_event(session):
    """Factory for valid events with a fixed timestamp."""
    from mobile_analytics.models import Event

    def _make(event_type="level_complete", attributes=None, metrics=None):
        return Event(
            event_type=event_type,
            timestamp="2024-01-01T12:00:01.000Z",
            session=session,
            attributes=attributes or {},
            metrics=metrics or {},
        )

    return _make
