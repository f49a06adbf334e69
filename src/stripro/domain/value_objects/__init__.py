"""Domain value objects.

Usage:
    from stripro.domain.value_objects import CacheConfig, RequestOptions
"""

from stripro.domain.value_objects.cache import CacheConfig, CacheEntry, CacheStats
from stripro.domain.value_objects.rate_limit import (
    RateLimitConfig,
    RateLimitEntry,
    RateLimitResult,
)
from stripro.domain.value_objects.request_config import RequestConfig, RequestOptions
from stripro.domain.value_objects.transport import TransportRequest, TransportResponse

__all__ = [
    "CacheConfig",
    "CacheEntry",
    "CacheStats",
    "RateLimitConfig",
    "RateLimitEntry",
    "RateLimitResult",
    "RequestConfig",
    "RequestOptions",
    "TransportRequest",
    "TransportResponse",
]
