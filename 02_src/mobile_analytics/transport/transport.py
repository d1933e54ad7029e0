"""Transport to the analytics ingestion endpoint, using httpx."""

from typing import Any, Protocol

import httpx

from ..config import DEFAULT_API_VERSION, DEFAULT_ENDPOINT, DEFAULT_REQUEST_TIMEOUT
from ..errors import TransportError
from ..logging_config import get_logger
from ..utils import dumps_json

logger = get_logger(__name__)

CLIENT_CONTEXT_HEADER = "x-amz-Client-Context"
ERROR_TYPE_HEADER = "x-amzn-ErrorType"


class ITransport(Protocol):
    """Remote PutEvents call."""

    async def put_events(self, events: list[dict], client_context: str) -> Any:
        """Send one batch. Raises TransportError on failure."""
        ...


def _error_code(response: httpx.Response) -> str | None:
    """Service error type from the response header or JSON body."""
    header = response.headers.get(ERROR_TYPE_HEADER)
    if header:
        # "ValidationException:http://internal.amazon.com/..." form
        return header.split(":", 1)[0]

    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None

    code = body.get("__type") or body.get("code")
    if isinstance(code, str):
        return code.rsplit("#", 1)[-1]
    return None


class HttpTransport:
    """Posts batches as JSON to ``{endpoint}/{api_version}/events``."""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        api_version: str = DEFAULT_API_VERSION,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self._url = f"{endpoint.rstrip('/')}/{api_version}/events"
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()

    @property
    def url(self) -> str:
        return self._url

    async def put_events(self, events: list[dict], client_context: str) -> Any:
        """Send a batch and return the decoded response body, if any."""
        try:
            response = await self._client.post(
                self._url,
                content=dumps_json({"events": events}),
                headers={
                    "Content-Type": "application/json",
                    CLIENT_CONTEXT_HEADER: client_context,
                },
                timeout=self._timeout,
            )
        except httpx.RequestError as e:
            raise TransportError(
                f"Request to {self._url} failed: {e}", code=type(e).__name__
            ) from e

        if response.status_code >= 400:
            code = _error_code(response)
            raise TransportError(
                f"PutEvents returned HTTP {response.status_code}"
                + (f" ({code})" if code else ""),
                status_code=response.status_code,
                code=code,
            )

        logger.debug("PutEvents accepted with HTTP %s", response.status_code)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()
