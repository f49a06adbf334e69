"""Domain errors package.

Usage:
    from stripro.domain.errors import CancellationError, TransportError
"""

from stripro.domain.errors.transport_error import CancellationError, TransportError

__all__ = ["CancellationError", "TransportError"]
