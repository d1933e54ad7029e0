"""Tests for logging configuration."""

import json
import logging

import pytest

from mobile_analytics.logging_config import PACKAGE_LOGGER, JSONFormatter, setup_logging


@pytest.fixture
def restore_package_logger():
    """Undo setup_logging() so other tests keep propagating to caplog."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield logger
    for handler in logger.handlers:
        if handler not in handlers:
            handler.close()
    logger.handlers = handlers
    logger.setLevel(level)
    logger.propagate = propagate


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        record = logging.LogRecord(
            "mobile_analytics.client", logging.INFO, __file__, 10, "sent %s", ("b1",), None
        )

        data = json.loads(JSONFormatter().format(record))

        assert data["level"] == "INFO"
        assert data["logger"] == "mobile_analytics.client"
        assert data["message"] == "sent b1"
        assert data["line"] == 10

    def test_context_included(self):
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), None)
        record.context = {"batch_id": "b1"}

        data = json.loads(JSONFormatter().format(record))

        assert data["context"] == {"batch_id": "b1"}


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_configures_package_logger(self, restore_package_logger, tmp_path):
        log_file = tmp_path / "logs" / "analytics.log"

        setup_logging(log_level="debug", log_file=str(log_file))
        logging.getLogger("mobile_analytics.batching").debug("hello")

        assert restore_package_logger.level == logging.DEBUG
        assert not restore_package_logger.propagate
        for handler in restore_package_logger.handlers:
            handler.flush()
        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["message"] == "hello"
