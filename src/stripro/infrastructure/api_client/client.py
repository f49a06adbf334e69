"""API client runtime.

One request pipeline shared by every service:

    request interceptors -> cache check (reads) -> cancellation check
    -> rate limit check -> retry executor wrapping the transport
    -> envelope validation -> response interceptors
    -> cache write (reads) / cache invalidation (mutations) -> data

Every failure, wherever it happens after the call's configuration is built,
is normalized into an ApiError, passed through the error interceptors and
raised to the caller.

Architecture:
    - Infrastructure layer; talks to the backend only through
      TransportProtocol (HttpxTransport by default)
    - Retry layer works on Result types; the runtime is the boundary where
      failures become exceptions

Usage:
    async with ApiClient("http://localhost:3000") as client:
        client.set_auth_token(token)
        clients = await client.get(
            "/clients" + ApiClient.build_query_string({"page": 1}),
            RequestOptions(cache=CacheConfig(ttl_seconds=300)),
        )
"""

from __future__ import annotations

import asyncio
from typing import Any, Self

import structlog
from pydantic import ValidationError

from stripro.core.cancellation import CancellationToken
from stripro.core.clock import Clock, now_ms
from stripro.core.config import Settings, get_settings
from stripro.core.constants import AUTHORIZATION_HEADER, BEARER_PREFIX, DEFAULT_HEADERS
from stripro.core.enums import ErrorCode, ErrorKind, HttpMethod, RequestKind
from stripro.core.errors import ApiError
from stripro.core.result import Failure, Success
from stripro.domain.errors import CancellationError, TransportError
from stripro.domain.protocols import LoggerProtocol, TransportProtocol
from stripro.domain.value_objects import (
    CacheStats,
    RequestConfig,
    RequestOptions,
    TransportRequest,
    TransportResponse,
)
from stripro.infrastructure.api_client import error_normalizer
from stripro.infrastructure.api_client.interceptors import (
    ErrorInterceptor,
    InterceptorPipeline,
    RequestInterceptor,
    ResponseInterceptor,
)
from stripro.infrastructure.api_client.query_string import build_query_string
from stripro.infrastructure.api_client.retry import RetryExecutor, Sleep
from stripro.infrastructure.cache import ResponseCache, build_cache_key, default_tags
from stripro.infrastructure.rate_limit import FixedWindowRateLimiter
from stripro.infrastructure.transport import HttpxTransport
from stripro.schemas import Envelope


class ApiClient:
    """Generic API client with interceptors, caching, rate limiting and retry.

    Services subclass it and bind a base URL (see infrastructure.services).

    Attributes:
        base_url: Backend base URL without trailing slash.

    Example:
        >>> client = ApiClient("http://localhost:3000", transport=fake)
        >>> client.add_request_interceptor(lambda c: c.with_header("X-Trace", "1"))
        >>> await client.get("/clients/42")
        {'id': '42', ...}
    """

    build_query_string = staticmethod(build_query_string)

    def __init__(
        self,
        base_url: str,
        default_headers: dict[str, str] | None = None,
        *,
        transport: TransportProtocol | None = None,
        logger: LoggerProtocol | None = None,
        settings: Settings | None = None,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
        log_traffic: bool = True,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend base URL.
            default_headers: Headers merged over the JSON defaults.
            transport: Request transport; an owned HttpxTransport when None.
            logger: Structured logger; the application logger when None.
            settings: Settings; get_settings() when None.
            clock: Epoch-milliseconds source for cache and rate limiting.
            sleep: Backoff sleep (seconds); asyncio.sleep when None.
            log_traffic: Register the default logging interceptors.
        """
        self._settings = settings or get_settings()
        if logger is None:
            from stripro.core.container import get_logger

            logger = get_logger()
        self._logger = logger

        self.base_url = base_url.rstrip("/")
        self._default_headers: dict[str, str] = {
            **DEFAULT_HEADERS,
            **(default_headers or {}),
        }
        self._auth_token: str | None = None

        self._owns_transport = transport is None
        self._transport: TransportProtocol = transport or HttpxTransport(
            default_timeout_ms=self._settings.request_timeout_ms
        )

        clock = clock or now_ms
        self._cache = ResponseCache(
            clock=clock, sweep_threshold=self._settings.cache_sweep_threshold
        )
        self._rate_limiter = FixedWindowRateLimiter(clock=clock)
        self._retry = RetryExecutor(
            backoff_base_ms=self._settings.retry_backoff_base_ms,
            sleep=sleep or asyncio.sleep,
            logger=self._logger,
        )
        self._interceptors = InterceptorPipeline()

        if log_traffic:
            self._setup_default_interceptors()

    # -------------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------------

    @property
    def auth_token(self) -> str | None:
        return self._auth_token

    @property
    def default_headers(self) -> dict[str, str]:
        """Copy of the headers sent with every request."""
        return dict(self._default_headers)

    def set_auth_token(self, token: str) -> None:
        """Send ``Authorization: Bearer <token>`` with every request."""
        self._auth_token = token
        self._default_headers[AUTHORIZATION_HEADER] = f"{BEARER_PREFIX}{token}"

    def clear_auth_token(self) -> None:
        """Stop sending the Authorization header."""
        self._auth_token = None
        self._default_headers.pop(AUTHORIZATION_HEADER, None)

    # -------------------------------------------------------------------------
    # Interceptors
    # -------------------------------------------------------------------------

    def add_request_interceptor(self, interceptor: RequestInterceptor) -> None:
        self._interceptors.add_request(interceptor)

    def add_response_interceptor(self, interceptor: ResponseInterceptor) -> None:
        self._interceptors.add_response(interceptor)

    def add_error_interceptor(self, interceptor: ErrorInterceptor) -> None:
        self._interceptors.add_error(interceptor)

    def remove_request_interceptor(self, interceptor: RequestInterceptor) -> bool:
        return self._interceptors.remove_request(interceptor)

    def remove_response_interceptor(self, interceptor: ResponseInterceptor) -> bool:
        return self._interceptors.remove_response(interceptor)

    def remove_error_interceptor(self, interceptor: ErrorInterceptor) -> bool:
        return self._interceptors.remove_error(interceptor)

    # -------------------------------------------------------------------------
    # HTTP verbs
    # -------------------------------------------------------------------------

    async def get(self, endpoint: str, options: RequestOptions | None = None) -> Any:
        return await self.request(HttpMethod.GET, endpoint, None, options)

    async def post(
        self, endpoint: str, body: Any = None, options: RequestOptions | None = None
    ) -> Any:
        return await self.request(HttpMethod.POST, endpoint, body, options)

    async def put(
        self, endpoint: str, body: Any = None, options: RequestOptions | None = None
    ) -> Any:
        return await self.request(HttpMethod.PUT, endpoint, body, options)

    async def patch(
        self, endpoint: str, body: Any = None, options: RequestOptions | None = None
    ) -> Any:
        return await self.request(HttpMethod.PATCH, endpoint, body, options)

    async def delete(
        self, endpoint: str, options: RequestOptions | None = None
    ) -> Any:
        return await self.request(HttpMethod.DELETE, endpoint, None, options)

    async def request(
        self,
        method: HttpMethod | str,
        endpoint: str,
        body: Any = None,
        options: RequestOptions | None = None,
        *,
        kind: RequestKind | None = None,
    ) -> Any:
        """Run one call through the full pipeline.

        Args:
            method: HTTP method.
            endpoint: Path (with query string) appended to base_url.
            body: JSON body for non-GET requests.
            options: Call-site overrides of the client defaults.
            kind: READ or MUTATION; defaults to READ for GET only.

        Returns:
            The response envelope's ``data`` member.

        Raises:
            ApiError: On any failure, after the error interceptors ran.
            ValueError: If options are invalid (negative retries, ...).
        """
        method = HttpMethod(method.upper()) if isinstance(method, str) else method
        kind = kind or method.default_kind
        url = f"{self.base_url}{endpoint}"
        config = RequestConfig.resolve(
            default_headers=self._default_headers,
            default_timeout_ms=self._settings.request_timeout_ms,
            default_retries=self._settings.request_retries,
            options=options,
        )

        with structlog.contextvars.bound_contextvars(
            http_method=method.value, endpoint=endpoint
        ):
            try:
                return await self._process(method, endpoint, url, body, config, kind)
            except Exception as exc:
                final = await self._error_path(exc, url)
                if final is exc:
                    raise
                raise final from exc

    # -------------------------------------------------------------------------
    # Cache and rate limit control
    # -------------------------------------------------------------------------

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def rate_limiter(self) -> FixedWindowRateLimiter:
        return self._rate_limiter

    def clear_cache(self) -> None:
        """Drop every cached response and reset hit/miss counters."""
        self._cache.clear()

    def get_cache_stats(self) -> CacheStats:
        return self._cache.stats()

    def invalidate_cache(self, name: str) -> list[str]:
        """Invalidate entries as a successful mutation named ``name`` would."""
        removed = self._cache.invalidate_matching(name)
        if removed:
            self._logger.debug(
                "api_cache_invalidated", name=name, removed=len(removed)
            )
        return removed

    def reset_rate_limits(self) -> None:
        """Forget every rate limit window."""
        self._rate_limiter.clear()

    def create_abort_controller(self) -> CancellationToken:
        """Create a token to cancel calls made with it."""
        return CancellationToken()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    async def _process(
        self,
        method: HttpMethod,
        endpoint: str,
        url: str,
        body: Any,
        config: RequestConfig,
        kind: RequestKind,
    ) -> Any:
        config = await self._interceptors.apply_request(config)

        cache_key: str | None = None
        if kind is RequestKind.READ and config.cache is not None:
            cache_key = config.cache.key or build_cache_key(
                endpoint, body if method is not HttpMethod.GET else None
            )
            entry = self._cache.lookup(cache_key)
            if entry is not None:
                self._logger.debug("api_cache_hit", cache_key=cache_key)
                return entry.data
            self._logger.debug("api_cache_miss", cache_key=cache_key)

        token = config.cancel_token
        self._raise_if_cancelled(token, url)

        if config.rate_limit is not None:
            verdict = self._rate_limiter.check(endpoint, config.rate_limit)
            if not verdict.allowed:
                self._logger.warning(
                    "api_rate_limited",
                    retry_after_ms=verdict.retry_after_ms,
                    limit=verdict.limit,
                )
                raise error_normalizer.rate_limited(verdict, key=endpoint, path=url)

        transport_request = TransportRequest(
            method=method,
            url=url,
            headers=dict(config.headers),
            json=body if method is not HttpMethod.GET else None,
            timeout_ms=config.timeout_ms,
        )
        outcome = await self._retry.execute(
            lambda: self._transport.send(transport_request),
            config.retries,
            cancel_token=token,
            timeout_ms=config.timeout_ms,
            url=url,
        )

        match outcome:
            case Success(value=response):
                pass
            case Failure(error=CancellationError() as cancelled):
                raise error_normalizer.from_cancellation(
                    path=url,
                    reason=token.reason if token is not None else None,
                    error=cancelled,
                )
            case Failure(error=TransportError() as failure):
                raise error_normalizer.from_transport_error(failure, path=url)

        if not response.is_success:
            raise error_normalizer.from_http_response(response, path=url)

        envelope = await self._interceptors.apply_response(
            self._parse_envelope(response, url)
        )

        if kind is RequestKind.READ:
            if cache_key is not None and config.cache is not None:
                self._raise_if_cancelled(token, url)
                self._cache.set(
                    cache_key,
                    envelope.data,
                    config.cache.ttl_seconds,
                    config.cache.tags or default_tags(endpoint),
                )
        else:
            self.invalidate_cache(config.invalidates or endpoint)

        return envelope.data

    @staticmethod
    def _parse_envelope(response: TransportResponse, url: str) -> Envelope[Any]:
        if not isinstance(response.body, dict):
            raise error_normalizer.invalid_response(response, path=url)
        try:
            return Envelope[Any].model_validate(response.body)
        except ValidationError as e:
            raise error_normalizer.invalid_response(response, path=url, error=e) from e

    @staticmethod
    def _raise_if_cancelled(token: CancellationToken | None, url: str) -> None:
        if token is not None and token.is_cancelled():
            raise error_normalizer.from_cancellation(path=url, reason=token.reason)

    async def _error_path(self, exc: Exception, url: str) -> ApiError:
        error = error_normalizer.from_exception(exc, path=url)
        if error.path is None:
            error.path = url

        final = await self._interceptors.apply_error(error)

        # Interceptors enrich errors; classification stays with the pipeline.
        replaced = (
            final.code == ErrorCode.INTERCEPTOR_FAILED.value
            and error.code != ErrorCode.INTERCEPTOR_FAILED.value
        )
        if final.kind is not error.kind and not replaced:
            final = final.with_updates(kind=error.kind)
        return final

    # -------------------------------------------------------------------------
    # Default interceptors
    # -------------------------------------------------------------------------

    def _setup_default_interceptors(self) -> None:
        logger = self._logger

        def log_request(config: RequestConfig) -> RequestConfig:
            logger.debug(
                "api_request",
                headers=sorted(config.headers),
                timeout_ms=config.timeout_ms,
                retries=config.retries,
                cached=config.cache is not None,
                rate_limited=config.rate_limit is not None,
            )
            return config

        def log_response(envelope: Envelope[Any]) -> Envelope[Any]:
            logger.debug(
                "api_response",
                success=envelope.success,
                data_type=type(envelope.data).__name__,
                total=envelope.meta.total if envelope.meta else None,
            )
            return envelope

        def log_error(error: ApiError) -> ApiError:
            if error.kind in (ErrorKind.CLIENT, ErrorKind.RATE_LIMITED, ErrorKind.CANCELLED):
                logger.warning(
                    "api_error",
                    code=error.code,
                    kind=error.kind.value,
                    message=error.message,
                    path=error.path,
                )
            else:
                logger.error(
                    "api_error",
                    error=error,
                    code=error.code,
                    kind=error.kind.value,
                    path=error.path,
                )
            return error

        self.add_request_interceptor(log_request)
        self.add_response_interceptor(log_response)
        self.add_error_interceptor(log_error)
