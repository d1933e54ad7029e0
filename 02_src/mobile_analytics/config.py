"""Client configuration and path helpers."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DATA_DIR = PROJECT_ROOT / "03_data"
DEFAULT_DB_PATH = DATA_DIR / "mobile_analytics.db"

DEFAULT_API_VERSION = "2014-06-05"
DEFAULT_ENDPOINT = "https://mobileanalytics.us-east-1.amazonaws.com"
DEFAULT_AUTO_SUBMIT_INTERVAL = 10.0  # seconds
DEFAULT_BATCH_SIZE_LIMIT = 256000  # bytes
DEFAULT_REQUEST_TIMEOUT = 10.0  # seconds

SDK_NAME = "mobile-analytics-python"
SDK_VERSION = "0.1.0"


PathLike = Union[str, Path]

SubmitCallback = Callable[[Exception | None, Any, str], None]


def resolve_db_path(env_value: PathLike | None = None) -> PathLike:
    """Resolve ANALYTICS_DB_PATH to an absolute path."""
    if not env_value:
        return DEFAULT_DB_PATH

    if str(env_value) == ":memory:":
        return ":memory:"

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else DATA_DIR / candidate


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ClientOptions:
    """Options for AnalyticsClient.

    Only ``app_id`` is required. Device and app metadata are not collected by
    the client; pass whatever the host application knows.
    """

    app_id: str | None = None
    platform: str | None = None
    api_version: str = DEFAULT_API_VERSION
    endpoint: str = DEFAULT_ENDPOINT
    auto_submit_events: bool = True
    auto_submit_interval: float = DEFAULT_AUTO_SUBMIT_INTERVAL
    batch_size_limit: int = DEFAULT_BATCH_SIZE_LIMIT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    submit_callback: SubmitCallback | None = None
    global_attributes: dict[str, Any] = field(default_factory=dict)
    global_metrics: dict[str, Any] = field(default_factory=dict)

    # Client context
    client_id: str | None = None
    app_title: str | None = None
    app_version_name: str | None = None
    app_version_code: str | None = None
    app_package_name: str | None = None
    platform_version: str | None = None
    model: str | None = None
    make: str | None = None
    locale: str | None = None
    client_context: dict | None = None  # replaces the generated context

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientOptions":
        """Build options from ANALYTICS_* environment variables."""
        values: dict[str, Any] = {
            "app_id": os.getenv("ANALYTICS_APP_ID"),
            "platform": os.getenv("ANALYTICS_PLATFORM"),
            "api_version": os.getenv("ANALYTICS_API_VERSION", DEFAULT_API_VERSION),
            "endpoint": os.getenv("ANALYTICS_ENDPOINT", DEFAULT_ENDPOINT),
            "auto_submit_events": _env_bool("ANALYTICS_AUTO_SUBMIT", True),
            "auto_submit_interval": float(
                os.getenv("ANALYTICS_AUTO_SUBMIT_INTERVAL", DEFAULT_AUTO_SUBMIT_INTERVAL)
            ),
            "batch_size_limit": int(
                os.getenv("ANALYTICS_BATCH_SIZE_LIMIT", DEFAULT_BATCH_SIZE_LIMIT)
            ),
            "request_timeout": float(
                os.getenv("ANALYTICS_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT)
            ),
            "client_id": os.getenv("ANALYTICS_CLIENT_ID"),
        }
        values.update(overrides)
        return cls(**values)
