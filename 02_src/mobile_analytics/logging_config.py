"""Logging setup for the analytics client.

The package logger carries a ``NullHandler``, so nothing is emitted until the
host application configures logging, either on its own or with
:func:`setup_logging`.
"""

import json
import logging
import logging.config
import logging.handlers
import os
from datetime import datetime, timezone
from pathlib import Path

PACKAGE_LOGGER = "mobile_analytics"


class JSONFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # batch_id / event_type etc. passed through ``extra={"context": ...}``
        if hasattr(record, "context"):
            log_data["context"] = record.context

        return json.dumps(log_data, default=str)


def setup_logging(
    log_level: str | None = None,
    log_file: str | None = None,
) -> None:
    """
    Configure structured logging for the ``mobile_analytics`` logger tree.

    Args:
        log_level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                   Defaults to ANALYTICS_LOG_LEVEL env var or INFO.
        log_file: Optional path to a rotating log file. Defaults to the
                  ANALYTICS_LOG_FILE env var; console only when unset.
    """
    if log_level is None:
        log_level = os.getenv("ANALYTICS_LOG_LEVEL", "INFO")

    if log_file is None:
        log_file = os.getenv("ANALYTICS_LOG_FILE")

    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "stream": "ext://sys.stdout",
        },
    }

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": log_file,
            "maxBytes": 10 * 1024 * 1024,  # 10 MB
            "backupCount": 5,
            "formatter": "json",
            "encoding": "utf-8",
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {
                "()": "mobile_analytics.logging_config.JSONFormatter",
            },
        },
        "handlers": handlers,
        "loggers": {
            PACKAGE_LOGGER: {
                "level": log_level.upper(),
                "handlers": list(handlers),
                "propagate": False,
            },
        },
    }

    logging.config.dictConfig(logging_config)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
