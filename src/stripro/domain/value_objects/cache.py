"""Cache value objects.

Usage:
    from stripro.domain.value_objects import CacheConfig

    config = CacheConfig(ttl_seconds=60, tags={"clients"})
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True, kw_only=True)
class CacheConfig:
    """Per-call caching configuration (value object).

    Attributes:
        ttl_seconds: Seconds a cached read stays live.
        tags: Resource names used to match mutations for invalidation.
            When empty, the entry is tagged with the endpoint's resource.
        key: Explicit cache key; derived from endpoint and body when None.

    Raises:
        ValueError: If ttl_seconds <= 0.
    """

    ttl_seconds: int
    tags: frozenset[str] = field(default_factory=frozenset)
    key: str | None = None

    def __post_init__(self) -> None:
        if self.ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {self.ttl_seconds}")
        if not isinstance(self.tags, frozenset):
            tags: Iterable[str] = self.tags
            object.__setattr__(self, "tags", frozenset(tags))


@dataclass(frozen=True, slots=True, kw_only=True)
class CacheEntry:
    """A cached successful read.

    Attributes:
        key: Cache key.
        data: The envelope's data member.
        expires_at_ms: Epoch milliseconds after which the entry is stale.
        tags: Resource names used for invalidation matching.
    """

    key: str
    data: Any
    expires_at_ms: int
    tags: frozenset[str] = field(default_factory=frozenset)

    def is_live(self, now_ms: int) -> bool:
        """Entry is live up to and including its expiry instant."""
        return now_ms <= self.expires_at_ms


@dataclass(frozen=True, slots=True, kw_only=True)
class CacheStats:
    """Snapshot of cache state returned by get_cache_stats().

    Attributes:
        size: Entries currently stored (live or not yet swept).
        hits: Lookups answered from the cache.
        misses: Lookups that found nothing live.
    """

    size: int
    hits: int = 0
    misses: int = 0

    @property
    def hit_rate(self) -> float:
        """Cache hit rate (0.0 to 1.0)."""
        total = self.hits + self.misses
        if total == 0:
            return 0.0
        return self.hits / total

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary for JSON serialization."""
        return {
            "size": self.size,
            "hitRate": round(self.hit_rate, 4),
            "hits": self.hits,
            "misses": self.misses,
        }
