"""Stripro API client runtime.

Shared request pipeline used by the Stripro dashboard services: interceptor
chaining, TTL response caching, fixed-window rate limiting and bounded retry
with exponential backoff.

Usage:
    from stripro import ApiClient, RequestOptions, CacheConfig

    async with ApiClient("https://api.example.com") as client:
        users = await client.get(
            "/users",
            RequestOptions(cache=CacheConfig(ttl_seconds=60)),
        )
"""

from stripro.core.errors import ApiError
from stripro.domain.value_objects import (
    CacheConfig,
    RateLimitConfig,
    RequestConfig,
    RequestOptions,
)
from stripro.infrastructure.api_client import ApiClient, CancellationToken
from stripro.schemas import Envelope

__all__ = [
    "ApiClient",
    "ApiError",
    "CacheConfig",
    "CancellationToken",
    "Envelope",
    "RateLimitConfig",
    "RequestConfig",
    "RequestOptions",
]

__version__ = "0.1.0"
