"""Interceptor pipeline.

Three ordered chains, each run in registration order (never reversed),
each interceptor receiving the previous one's output:

    request:  RequestConfig -> RequestConfig   (before cache/rate limit/dispatch)
    response: Envelope      -> Envelope        (before the cache write)
    error:    ApiError      -> ApiError        (on every failure path)

Interceptors may be plain functions or coroutines.

Failure semantics:
    - A request/response interceptor that raises aborts its chain. An
      ApiError propagates as is; any other exception (or a wrong return
      type) becomes ApiError(INTERCEPTOR_FAILED).
    - An error interceptor that raises does not abort the call: its failure
      (INTERCEPTOR_FAILED) replaces the error being propagated and the
      remaining error interceptors are skipped.
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from stripro.core.errors import ApiError
from stripro.domain.value_objects import RequestConfig
from stripro.infrastructure.api_client import error_normalizer
from stripro.schemas import Envelope

type RequestInterceptor = Callable[
    [RequestConfig], RequestConfig | Awaitable[RequestConfig]
]
type ResponseInterceptor = Callable[
    [Envelope[Any]], Envelope[Any] | Awaitable[Envelope[Any]]
]
type ErrorInterceptor = Callable[[ApiError], ApiError | Awaitable[ApiError]]


class InterceptorTypeError(TypeError):
    """An interceptor returned something other than what it received."""


class InterceptorPipeline:
    """Ordered request, response and error interceptor chains."""

    def __init__(self) -> None:
        self._request: list[RequestInterceptor] = []
        self._response: list[ResponseInterceptor] = []
        self._error: list[ErrorInterceptor] = []

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def add_request(self, interceptor: RequestInterceptor) -> None:
        self._request.append(interceptor)

    def add_response(self, interceptor: ResponseInterceptor) -> None:
        self._response.append(interceptor)

    def add_error(self, interceptor: ErrorInterceptor) -> None:
        self._error.append(interceptor)

    def remove_request(self, interceptor: RequestInterceptor) -> bool:
        return _remove(self._request, interceptor)

    def remove_response(self, interceptor: ResponseInterceptor) -> bool:
        return _remove(self._response, interceptor)

    def remove_error(self, interceptor: ErrorInterceptor) -> bool:
        return _remove(self._error, interceptor)

    @property
    def counts(self) -> dict[str, int]:
        """Number of registered interceptors per chain."""
        return {
            "request": len(self._request),
            "response": len(self._response),
            "error": len(self._error),
        }

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    async def apply_request(self, config: RequestConfig) -> RequestConfig:
        """Run the request chain.

        Raises:
            ApiError: Raised by an interceptor, or INTERCEPTOR_FAILED.
        """
        for interceptor in list(self._request):
            config = await _run(interceptor, config, RequestConfig, stage="request")
        return config

    async def apply_response(self, envelope: Envelope[Any]) -> Envelope[Any]:
        """Run the response chain.

        Raises:
            ApiError: Raised by an interceptor, or INTERCEPTOR_FAILED.
        """
        for interceptor in list(self._response):
            envelope = await _run(interceptor, envelope, Envelope, stage="response")
        return envelope

    async def apply_error(self, error: ApiError) -> ApiError:
        """Run the error chain. Never raises (except task cancellation).

        Returns:
            ApiError: Final error to raise. An INTERCEPTOR_FAILED error when
                an error interceptor failed; later interceptors are skipped.
        """
        for interceptor in list(self._error):
            try:
                error = await _run(interceptor, error, ApiError, stage="error")
            except ApiError as failure:
                return failure
        return error


async def _run[V](
    interceptor: Callable[[V], Any], value: V, expected: type, *, stage: str
) -> V:
    name = _name(interceptor)
    try:
        result = interceptor(value)
        if inspect.isawaitable(result):
            result = await result
        if not isinstance(result, expected):
            raise InterceptorTypeError(
                f"returned {type(result).__name__}, expected {expected.__name__}"
            )
    except ApiError as e:
        if stage == "error":
            raise error_normalizer.interceptor_failure(
                e, stage=stage, interceptor=name
            ) from e
        raise
    except Exception as e:
        raise error_normalizer.interceptor_failure(
            e, stage=stage, interceptor=name
        ) from e
    return result


def _remove(chain: list[Any], interceptor: Any) -> bool:
    try:
        chain.remove(interceptor)
    except ValueError:
        return False
    return True


def _name(interceptor: Any) -> str:
    return getattr(interceptor, "__qualname__", None) or repr(interceptor)
