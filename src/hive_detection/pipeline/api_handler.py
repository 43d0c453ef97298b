"""Provider transport: one POST per analysis.

Two failure classes are kept apart on purpose:

- no response at all (DNS, refused connection, timeout) -> `NetworkError`
- a response that reports failure (non-2xx status, unusable body, or the
  provider's own error envelope) -> `APIError`
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from hive_detection.constants import NETWORK_TIMEOUT
from hive_detection.core.types import Failure, ProviderRequest, Result, Success
from hive_detection.exceptions import APIError, DetectionError, NetworkError

log = logging.getLogger(__name__)


class ProviderClient:
    """Sends `ProviderRequest`s to the provider with `httpx`."""

    def __init__(
        self,
        timeout: float = NETWORK_TIMEOUT,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            timeout: Transport timeout in seconds for one call.
            transport: Optional `httpx` transport, e.g. `httpx.MockTransport` in tests.
        """
        self.timeout = timeout
        self._transport = transport

    def _create_http_client(self) -> httpx.AsyncClient:
        """Create a configured HTTP client - centralized configuration"""  # noqa: D415
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def send(self, request: ProviderRequest) -> Result[dict[str, Any], DetectionError]:
        """Dispatch `request` and return the decoded provider payload."""
        try:
            async with self._create_http_client() as client:
                response = await client.post(
                    request.url,
                    headers=dict(request.headers),
                    data=dict(request.data) if request.data else None,
                    files=dict(request.files) if request.files else None,
                )
        except httpx.TransportError as e:
            log.debug("Transport failure calling %s: %r", request.url, e)
            return Failure(
                NetworkError(
                    f"Network error. Please check your internet connection. ({type(e).__name__})"
                )
            )

        if response.is_error:
            return Failure(_status_error(response))

        try:
            payload = response.json()
        except ValueError:
            return Failure(
                APIError(
                    f"API Error: provider returned a non-JSON body (HTTP {response.status_code})",
                    status_code=response.status_code,
                )
            )
        if not isinstance(payload, dict):
            return Failure(
                APIError(
                    "API Error: provider returned an unexpected payload",
                    status_code=response.status_code,
                )
            )

        envelope = _status_envelope(payload)
        if envelope is not None:
            code, message = envelope
            if code != 0:
                return Failure(
                    APIError(
                        f"Hive API Error: {message or f'status code {code}'}",
                        status_code=response.status_code,
                    )
                )

        return Success(payload)


def _status_error(response: httpx.Response) -> APIError:
    """Build an `APIError` from a non-success response."""
    message = None
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            message = error.get("message") or None
        elif isinstance(error, str):
            message = error or None
        if message is None and isinstance(body.get("message"), str):
            message = body["message"] or None
    if not message:
        message = f"HTTP {response.status_code}: {response.reason_phrase}"
    return APIError(f"API Error: {message}", status_code=response.status_code)


def _status_envelope(payload: dict[str, Any]) -> tuple[int, str | None] | None:
    """Return (code, message) from `status.status` when present and well-formed."""
    outer = payload.get("status")
    if not isinstance(outer, dict):
        return None
    inner = outer.get("status")
    if not isinstance(inner, dict):
        return None
    code = inner.get("code")
    if isinstance(code, bool) or not isinstance(code, int):
        return None
    message = inner.get("message")
    return code, message if isinstance(message, str) else None
