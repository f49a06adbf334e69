"""Transport-level error types.

These flow as data (inside Result) from transports through the retry
executor. The error normalizer turns them into ApiError for callers.

Usage:
    return Failure(
        error=TransportError(
            code=ErrorCode.TIMEOUT,
            message="Request timed out after 30000ms",
            is_timeout=True,
        )
    )
"""

from dataclasses import dataclass

from stripro.core.errors import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class TransportError(DomainError):
    """Network-level failure (connection refused, DNS, TLS, timeout).

    Always retryable by the retry executor.

    Attributes:
        code: NETWORK_ERROR or TIMEOUT.
        message: Human-readable message.
        url: Request URL, when known.
        is_timeout: Whether the attempt exceeded its timeout.
    """

    url: str | None = None
    is_timeout: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class CancellationError(DomainError):
    """The caller cancelled the operation; never retried.

    Attributes:
        code: CANCELLED.
        message: Human-readable message.
        attempts: Attempts made before cancellation was observed.
    """

    attempts: int = 0
