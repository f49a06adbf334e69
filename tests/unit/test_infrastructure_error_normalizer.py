"""Tests for stripro/infrastructure/api_client/error_normalizer.py."""

import pytest
from pydantic import BaseModel, ValidationError

from stripro.core.enums import ErrorCode, ErrorKind
from stripro.core.errors import ApiError
from stripro.domain.errors import CancellationError, TransportError
from stripro.domain.value_objects import RateLimitResult
from stripro.infrastructure.api_client import error_normalizer
from tests.conftest import status

PATH = "http://api.test/clients"


@pytest.mark.unit
class TestFromHttpResponse:
    def test_uses_body_message_and_details(self):
        response = status(
            422,
            {"message": "Email is invalid", "details": {"field": "email"}},
            url=PATH,
        )

        error = error_normalizer.from_http_response(response, path="/clients")

        assert error.code == "422"
        assert error.message == "Email is invalid"
        assert error.details == {"field": "email"}
        assert error.kind is ErrorKind.CLIENT
        assert error.path == PATH

    def test_falls_back_to_status_phrase(self):
        error = error_normalizer.from_http_response(status(404), path=PATH)

        assert error.message == "HTTP 404: Not Found"
        assert error.details is None
        assert error.path == PATH

    def test_server_errors_are_server_kind(self):
        error = error_normalizer.from_http_response(status(503), path=PATH)
        assert error.kind is ErrorKind.SERVER

    def test_unknown_status_phrase(self):
        error = error_normalizer.from_http_response(status(599), path=PATH)
        assert error.message == "HTTP 599: Unknown Status"

    def test_non_dict_body_is_ignored(self):
        error = error_normalizer.from_http_response(status(400, ["x"]), path=PATH)
        assert error.message == "HTTP 400: Bad Request"


@pytest.mark.unit
class TestLocalErrors:
    def test_transport_error(self):
        error = error_normalizer.from_transport_error(
            TransportError(code=ErrorCode.TIMEOUT, message="timed out", is_timeout=True),
            path=PATH,
        )

        assert error.code == "TIMEOUT"
        assert error.kind is ErrorKind.TRANSPORT
        assert error.path == PATH

    def test_cancellation_with_reason_and_attempts(self):
        error = error_normalizer.from_cancellation(
            path=PATH,
            reason="user left",
            error=CancellationError(code=ErrorCode.CANCELLED, message="x", attempts=2),
        )

        assert error.code == "CANCELLED"
        assert error.message == "Request was cancelled: user left"
        assert error.details == {"attempts": 2}
        assert error.kind is ErrorKind.CANCELLED

    def test_rate_limited_carries_retry_after(self):
        error = error_normalizer.rate_limited(
            RateLimitResult(allowed=False, limit=2, retry_after_ms=1500, reset_at_ms=9),
            key="/reports",
            path=PATH,
        )

        assert error.code == "RATE_LIMITED"
        assert error.details["retryAfterMs"] == 1500
        assert "Try again in 2 seconds" in error.message
        assert error.kind is ErrorKind.RATE_LIMITED

    def test_invalid_response_lists_validation_errors(self):
        class Model(BaseModel):
            data: int

        with pytest.raises(ValidationError) as exc_info:
            Model.model_validate({})

        error = error_normalizer.invalid_response(
            status(200, {"nope": 1}), path=PATH, error=exc_info.value
        )

        assert error.code == "INVALID_RESPONSE"
        assert error.details["errors"][0]["loc"] == ["data"]

    def test_interceptor_failure_chains_cause(self):
        cause = KeyError("missing")
        error = error_normalizer.interceptor_failure(
            cause, stage="request", interceptor="add_trace"
        )

        assert error.code == "INTERCEPTOR_FAILED"
        assert error.kind is ErrorKind.INTERNAL
        assert error.details["stage"] == "request"
        assert error.__cause__ is cause

    def test_from_exception_passes_api_error_through(self):
        original = ApiError(code="404", message="gone")
        assert error_normalizer.from_exception(original, path=PATH) is original

    def test_from_exception_wraps_other_errors(self):
        error = error_normalizer.from_exception(RuntimeError("kaput"), path=PATH)

        assert error.code == "UNKNOWN_ERROR"
        assert error.message == "kaput"
        assert error.path == PATH
