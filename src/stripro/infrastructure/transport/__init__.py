"""Request transports."""

from stripro.infrastructure.transport.httpx_transport import HttpxTransport

__all__ = ["HttpxTransport"]
