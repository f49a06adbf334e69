"""Transport protocol (port) between the client runtime and a backend.

The runtime never performs I/O itself. It hands a TransportRequest to a
transport and receives either a response (any HTTP status) or a
TransportError describing a network-level failure.

Contract:
    - Every HTTP answer, including 4xx/5xx, is Success(TransportResponse).
    - Network, DNS, TLS and timeout failures are Failure(TransportError).
    - Implementations may raise instead; the retry executor treats a raised
      exception (other than asyncio.CancelledError) as a transport failure.

Implementations:
    - HttpxTransport: httpx.AsyncClient adapter (production)
    - Scripted fakes in tests
"""

from typing import Protocol

from stripro.core.result import Result
from stripro.domain.errors import TransportError
from stripro.domain.value_objects.transport import TransportRequest, TransportResponse


class TransportProtocol(Protocol):
    """Protocol for request transports."""

    async def send(
        self, request: TransportRequest
    ) -> Result[TransportResponse, TransportError]:
        """Send one request attempt.

        Args:
            request: Fully built request (absolute URL, merged headers).

        Returns:
            Success(TransportResponse) for any HTTP answer.
            Failure(TransportError) for network-level failures.
        """
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
        ...
