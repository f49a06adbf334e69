"""Shared base for REST resource services.

Binds the client to ``settings.api_base_url`` and builds the cache options
every resource uses for its reads: TTL from settings, tagged with the
resource name so that mutations on the resource invalidate them. Bulk and
export endpoints are rate limited per endpoint with the settings window.
"""

from collections.abc import Iterable
from typing import ClassVar

from stripro.core.clock import Clock
from stripro.core.config import Settings, get_settings
from stripro.domain.protocols import LoggerProtocol, TransportProtocol
from stripro.domain.value_objects import CacheConfig, RateLimitConfig, RequestOptions
from stripro.infrastructure.api_client import ApiClient
from stripro.infrastructure.api_client.retry import Sleep


class RestService(ApiClient):
    """ApiClient bound to the REST API for one resource.

    Subclasses set ``resource`` ("clients", "transactions", "users").
    """

    resource: ClassVar[str]

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        transport: TransportProtocol | None = None,
        logger: LoggerProtocol | None = None,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
        log_traffic: bool = True,
    ) -> None:
        settings = settings or get_settings()
        super().__init__(
            settings.api_base_url,
            transport=transport,
            logger=logger,
            settings=settings,
            clock=clock,
            sleep=sleep,
            log_traffic=log_traffic,
        )

    def _cached(
        self, *, tags: Iterable[str] | None = None, ttl_seconds: int | None = None
    ) -> RequestOptions:
        """Options for a cached read tagged with this resource (or ``tags``)."""
        return RequestOptions(
            cache=CacheConfig(
                ttl_seconds=ttl_seconds or self._settings.cache_ttl_seconds,
                tags=frozenset(tags) if tags is not None else frozenset({self.resource}),
            )
        )

    def _rate_limited(self) -> RequestOptions:
        """Options for bulk/export endpoints, limited per endpoint."""
        return RequestOptions(
            rate_limit=RateLimitConfig(
                max_requests=self._settings.rate_limit_max_requests,
                window_ms=self._settings.rate_limit_window_ms,
            )
        )
