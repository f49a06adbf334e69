"""Per-call request configuration.

RequestOptions is what a call site passes (every field optional).
RequestConfig is the fully resolved, immutable configuration a single call
runs with: client defaults merged with the call-site overrides. Request
interceptors receive a RequestConfig and return a (possibly new) one.

Usage:
    from stripro.domain.value_objects import CacheConfig, RequestOptions

    options = RequestOptions(
        retries=3,
        cache=CacheConfig(ttl_seconds=60, tags={"clients"}),
    )
    clients = await client.get("/clients", options)
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from stripro.core.cancellation import CancellationToken
from stripro.domain.value_objects.cache import CacheConfig
from stripro.domain.value_objects.rate_limit import RateLimitConfig


@dataclass(frozen=True, slots=True, kw_only=True)
class RequestOptions:
    """Call-site overrides. None means "use the client default".

    Attributes:
        headers: Extra headers, merged over the client's default headers.
        timeout_ms: Per-attempt timeout.
        retries: Retries after the first attempt (>= 0).
        cache: Enables caching for read calls.
        rate_limit: Enables client-side rate limiting for this endpoint.
        cancel_token: Token the caller may cancel.
        invalidates: Name matched against cache tags when a mutation
            succeeds. Defaults to the endpoint.
    """

    headers: dict[str, str] | None = None
    timeout_ms: int | None = None
    retries: int | None = None
    cache: CacheConfig | None = None
    rate_limit: RateLimitConfig | None = None
    cancel_token: CancellationToken | None = None
    invalidates: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class RequestConfig:
    """Resolved configuration for one call (value object).

    Attributes:
        headers: Final headers (defaults, auth, call-site overrides).
            Treat as read-only; use with_header() to derive a new config.
        timeout_ms: Per-attempt timeout in milliseconds.
        retries: Retries after the first attempt.
        cache: Cache configuration, or None when caching is off.
        rate_limit: Rate limit configuration, or None.
        cancel_token: Cancellation token, or None.
        invalidates: Invalidation name for mutations, or None.

    Raises:
        ValueError: If retries < 0 or timeout_ms <= 0.
    """

    headers: dict[str, str] = field(default_factory=dict)
    timeout_ms: int
    retries: int = 0
    cache: CacheConfig | None = None
    rate_limit: RateLimitConfig | None = None
    cancel_token: CancellationToken | None = None
    invalidates: str | None = None

    def __post_init__(self) -> None:
        if self.retries < 0:
            raise ValueError(f"retries must be >= 0, got {self.retries}")
        if self.timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {self.timeout_ms}")

    @classmethod
    def resolve(
        cls,
        *,
        default_headers: dict[str, str],
        default_timeout_ms: int,
        default_retries: int,
        options: RequestOptions | None = None,
    ) -> RequestConfig:
        """Merge client defaults with call-site options.

        Args:
            default_headers: Client default headers (including auth).
            default_timeout_ms: Client default timeout.
            default_retries: Client default retry count.
            options: Call-site overrides.

        Returns:
            RequestConfig: Fresh config owned by a single call.
        """
        options = options or RequestOptions()
        headers = {**default_headers, **(options.headers or {})}
        return cls(
            headers=headers,
            timeout_ms=(
                options.timeout_ms
                if options.timeout_ms is not None
                else default_timeout_ms
            ),
            retries=options.retries if options.retries is not None else default_retries,
            cache=options.cache,
            rate_limit=options.rate_limit,
            cancel_token=options.cancel_token,
            invalidates=options.invalidates,
        )

    def with_header(self, name: str, value: str) -> RequestConfig:
        """Return a new config with one header set."""
        return dataclasses.replace(self, headers={**self.headers, name: value})

    def without_header(self, name: str) -> RequestConfig:
        """Return a new config with one header removed."""
        headers = {k: v for k, v in self.headers.items() if k != name}
        return dataclasses.replace(self, headers=headers)

    def with_updates(self, **changes: Any) -> RequestConfig:
        """Return a new config with the given fields replaced."""
        return dataclasses.replace(self, **changes)
