"""Exceptions used by the analytics client.

None of these escape the record/submit paths: they are logged, and submission
outcomes reach the application only through the submit callback.
"""


class AnalyticsError(Exception):
    """Base class for analytics client errors."""


class ConfigurationError(AnalyticsError):
    """Client options are unusable (e.g. no app_id)."""


class ValidationError(AnalyticsError):
    """An event breaks one of the schema or size rules."""


class OversizeBatchError(AnalyticsError):
    """A candidate batch is at or above the transport's hard payload cap."""

    def __init__(self, size: int, limit: int, event_count: int):
        super().__init__(
            f"Events too large: {event_count} event(s) estimated at {size} bytes "
            f"(hard limit {limit})"
        )
        self.size = size
        self.limit = limit
        self.event_count = event_count


class TransportError(AnalyticsError):
    """The remote call failed.

    ``status_code`` is None for network-layer failures. ``code`` is the
    service error type when one was reported.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class SubmissionError(AnalyticsError):
    """A batch submission failed; wraps the underlying TransportError."""

    retryable = False

    def __init__(self, batch_id: str, error: Exception):
        super().__init__(f"Batch {batch_id} failed: {error}")
        self.batch_id = batch_id
        self.status_code = getattr(error, "status_code", None)
        self.code = getattr(error, "code", None)


class TransientSubmissionError(SubmissionError):
    """Failure worth retrying; the batch stays stored."""

    retryable = True


class PermanentSubmissionError(SubmissionError):
    """Failure that will not be retried; the batch has been dropped."""
