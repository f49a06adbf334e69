"""Conversion of every failure into ApiError.

Single place where transport failures, cancellation, local rate limiting,
HTTP error responses, malformed bodies and failing interceptors become the
ApiError callers see. The error kind is decided here and never changed
afterwards.

Mapping:
    TransportError (NETWORK_ERROR/TIMEOUT) -> code NETWORK_ERROR/TIMEOUT, TRANSPORT
    Cancelled token                       -> CANCELLED, CANCELLED
    Rate limiter denial                   -> RATE_LIMITED, RATE_LIMITED
    HTTP 5xx                              -> "503", SERVER
    HTTP 4xx (and other non-2xx)          -> "404", CLIENT
    2xx body not an envelope              -> INVALID_RESPONSE, INVALID_RESPONSE
    Interceptor raised / wrong type       -> INTERCEPTOR_FAILED, INTERNAL
    Anything else                         -> UNKNOWN_ERROR, INTERNAL
"""

import math
from http import HTTPStatus
from typing import Any

from pydantic import ValidationError

from stripro.core.constants import RESPONSE_BODY_MAX_LENGTH
from stripro.core.enums import ErrorCode, ErrorKind
from stripro.core.errors import ApiError
from stripro.domain.errors import CancellationError, TransportError
from stripro.domain.value_objects import RateLimitResult, TransportResponse
from stripro.schemas import ErrorPayload


def from_transport_error(error: TransportError, *, path: str | None) -> ApiError:
    """Normalize a network-level failure (after retries are exhausted)."""
    return ApiError(
        code=error.code,
        message=error.message,
        kind=ErrorKind.TRANSPORT,
        details=error.details,
        path=error.url or path,
    )


def from_cancellation(
    *,
    path: str | None,
    reason: str | None = None,
    error: CancellationError | None = None,
) -> ApiError:
    """Normalize a cancelled call.

    Args:
        path: Request URL or endpoint.
        reason: Reason passed to CancellationToken.cancel().
        error: Cancellation observed by the retry executor, if any.
    """
    message = "Request was cancelled"
    if reason:
        message = f"{message}: {reason}"
    details = {"attempts": error.attempts} if error is not None else None
    return ApiError(
        code=ErrorCode.CANCELLED,
        message=message,
        kind=ErrorKind.CANCELLED,
        details=details,
        path=path,
    )


def rate_limited(
    result: RateLimitResult, *, key: str, path: str | None
) -> ApiError:
    """Normalize a local rate limiter denial."""
    seconds = math.ceil(result.retry_after_ms / 1000)
    return ApiError(
        code=ErrorCode.RATE_LIMITED,
        message=f"Rate limit exceeded for {key}. Try again in {seconds} seconds.",
        kind=ErrorKind.RATE_LIMITED,
        details={
            "retryAfterMs": result.retry_after_ms,
            "limit": result.limit,
            "resetAtMs": result.reset_at_ms,
        },
        path=path,
    )


def from_http_response(response: TransportResponse, *, path: str | None) -> ApiError:
    """Normalize a non-2xx response.

    The body's ``message`` and ``details`` are used when the backend sent
    an error payload; otherwise the message is "HTTP <status>: <reason>".
    """
    status = response.status_code
    payload = _error_payload(response.body)

    message = payload.message if payload and payload.message else None
    if message is None:
        message = f"HTTP {status}: {_reason_phrase(status)}"

    return ApiError(
        code=str(status),
        message=message,
        kind=ErrorKind.SERVER if response.is_server_error else ErrorKind.CLIENT,
        details=payload.details if payload else None,
        path=response.url or path,
    )


def invalid_response(
    response: TransportResponse,
    *,
    path: str | None,
    error: ValidationError | None = None,
) -> ApiError:
    """Normalize a 2xx response whose body is not an envelope."""
    details: dict[str, Any] = {"statusCode": response.status_code}
    if error is not None:
        details["errors"] = [
            {"loc": list(item["loc"]), "msg": item["msg"]} for item in error.errors()
        ]
    if response.body is None and response.text:
        details["body"] = response.text[:RESPONSE_BODY_MAX_LENGTH]
    return ApiError(
        code=ErrorCode.INVALID_RESPONSE,
        message="Response body is not a valid envelope",
        kind=ErrorKind.INVALID_RESPONSE,
        details=details,
        path=response.url or path,
    )


def interceptor_failure(exc: Exception, *, stage: str, interceptor: str) -> ApiError:
    """Normalize an interceptor that raised or returned the wrong type."""
    error = ApiError(
        code=ErrorCode.INTERCEPTOR_FAILED,
        message=f"{stage.capitalize()} interceptor {interceptor} failed: {exc}",
        kind=ErrorKind.INTERNAL,
        details={
            "stage": stage,
            "interceptor": interceptor,
            "errorType": type(exc).__name__,
        },
    )
    error.__cause__ = exc
    return error


def from_exception(exc: BaseException, *, path: str | None) -> ApiError:
    """Normalize an unexpected exception. ApiError passes through unchanged."""
    if isinstance(exc, ApiError):
        return exc
    error = ApiError(
        code=ErrorCode.UNKNOWN_ERROR,
        message=str(exc) or type(exc).__name__,
        kind=ErrorKind.INTERNAL,
        details={"errorType": type(exc).__name__},
        path=path,
    )
    error.__cause__ = exc
    return error


def _error_payload(body: Any) -> ErrorPayload | None:
    if not isinstance(body, dict):
        return None
    try:
        return ErrorPayload.model_validate(body)
    except ValidationError:
        return None


def _reason_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown Status"
