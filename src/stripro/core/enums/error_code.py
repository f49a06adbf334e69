"""Local error codes and retry classification.

HTTP failures carry their status code as the error code ("404", "503").
Failures produced inside the client (rate limiting, cancellation, transport
errors) use the codes below. Values are the wire strings seen by callers.
"""

from enum import Enum


class ErrorCode(Enum):
    """Client-local error codes (machine-readable)."""

    # Transport errors (retryable)
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"

    # Local terminal errors
    RATE_LIMITED = "RATE_LIMITED"
    CANCELLED = "CANCELLED"

    # Response processing
    INVALID_RESPONSE = "INVALID_RESPONSE"
    GRAPHQL_ERROR = "GRAPHQL_ERROR"
    TOOL_EXECUTION_FAILED = "TOOL_EXECUTION_FAILED"

    # Pipeline failures
    INTERCEPTOR_FAILED = "INTERCEPTOR_FAILED"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


class ErrorKind(Enum):
    """Failure classification.

    Decided once, where the failure is observed. Error interceptors may
    enrich an error but never change its kind.
    """

    TRANSPORT = "transport"
    SERVER = "server"
    CLIENT = "client"
    RATE_LIMITED = "rate_limited"
    CANCELLED = "cancelled"
    INVALID_RESPONSE = "invalid_response"
    INTERNAL = "internal"

    @property
    def is_retryable(self) -> bool:
        """Whether failures of this kind are retried by the executor."""
        return self in (ErrorKind.TRANSPORT, ErrorKind.SERVER)
