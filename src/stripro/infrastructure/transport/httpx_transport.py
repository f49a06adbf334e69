"""httpx transport adapter.

Implements TransportProtocol over a pooled httpx.AsyncClient:
- Every HTTP answer (any status) is returned as Success(TransportResponse)
- Timeouts become Failure(TransportError(code=TIMEOUT, is_timeout=True))
- Connection, DNS and TLS failures become Failure(TransportError(NETWORK_ERROR))
- Bodies are decoded as JSON when possible; otherwise body is None and the
  raw text is kept for error messages

Status interpretation (retry, error normalization) is NOT done here; that is
the client runtime's job.

Usage:
    transport = HttpxTransport()
    result = await transport.send(
        TransportRequest(method=HttpMethod.GET, url="http://localhost:3000/clients")
    )
    await transport.aclose()

Tests inject ``httpx.MockTransport`` through the ``client`` argument.
"""

from typing import Any

import httpx
import structlog

from stripro.core.constants import REQUEST_TIMEOUT_MS_DEFAULT
from stripro.core.enums import ErrorCode
from stripro.core.result import Failure, Result, Success
from stripro.domain.errors import TransportError
from stripro.domain.value_objects import TransportRequest, TransportResponse


class HttpxTransport:
    """Transport backed by httpx.AsyncClient.

    Attributes:
        _client: Pooled async client (owned unless supplied by the caller).
        _owns_client: Whether aclose() closes the client.
        _default_timeout_ms: Timeout used when a request carries none.
        _logger: Structured logger.

    Example:
        >>> async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as c:
        ...     transport = HttpxTransport(client=c)
        ...     result = await transport.send(request)
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient | None = None,
        default_timeout_ms: int = REQUEST_TIMEOUT_MS_DEFAULT,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Pre-configured AsyncClient. A new one is created when None.
            default_timeout_ms: Timeout for requests without timeout_ms.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient()
        self._default_timeout_ms = default_timeout_ms
        self._logger = structlog.get_logger("stripro_transport")

    async def send(
        self, request: TransportRequest
    ) -> Result[TransportResponse, TransportError]:
        """Send one request attempt.

        Args:
            request: Request with absolute URL and final headers.

        Returns:
            Success(TransportResponse): For any HTTP status.
            Failure(TransportError): On timeout or connection error.
        """
        timeout_ms = request.timeout_ms or self._default_timeout_ms

        try:
            response = await self._client.request(
                method=request.method.value,
                url=request.url,
                headers=request.headers,
                json=request.json,
                timeout=timeout_ms / 1000,
            )

        except httpx.TimeoutException as e:
            self._logger.warning(
                "transport_timeout",
                method=request.method.value,
                url=request.url,
                timeout_ms=timeout_ms,
                error=str(e),
            )
            return Failure(
                error=TransportError(
                    code=ErrorCode.TIMEOUT,
                    message=f"Request timed out after {timeout_ms}ms",
                    url=request.url,
                    is_timeout=True,
                )
            )

        except httpx.RequestError as e:
            self._logger.warning(
                "transport_connection_error",
                method=request.method.value,
                url=request.url,
                error=str(e),
            )
            return Failure(
                error=TransportError(
                    code=ErrorCode.NETWORK_ERROR,
                    message=f"Network error: {e}",
                    url=request.url,
                )
            )

        return Success(value=self._to_transport_response(response))

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    def _to_transport_response(self, response: httpx.Response) -> TransportResponse:
        body: Any
        try:
            body = response.json() if response.content else None
        except ValueError:
            self._logger.debug(
                "transport_non_json_body",
                url=str(response.request.url),
                status_code=response.status_code,
            )
            body = None

        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=body,
            text=response.text,
            url=str(response.request.url),
        )
