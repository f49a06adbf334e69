"""TTL response cache.

Holds the data of successful read calls keyed by a deterministic cache key.

Behavior:
    - Lazy expiry: an expired entry is deleted when looked up.
    - Opportunistic sweep: a write that leaves more than ``sweep_threshold``
      entries removes every expired entry.
    - Mutation invalidation by tag/name substring matching (see cache_keys).
    - Hit/miss counters for get_cache_stats().

Thread-safe: all state is guarded by one lock and no lock is held across
an await.
"""

from collections.abc import Iterable
from threading import Lock
from typing import Any

from stripro.core.clock import Clock, now_ms
from stripro.core.constants import CACHE_SWEEP_THRESHOLD
from stripro.domain.value_objects import CacheEntry, CacheStats
from stripro.infrastructure.cache.cache_keys import tag_matches


class ResponseCache:
    """In-memory TTL cache of read results.

    Example:
        cache = ResponseCache()
        cache.set("/clients", [{"id": "1"}], ttl_seconds=60, tags={"clients"})
        cache.get("/clients")          # [{"id": "1"}]
        cache.invalidate_matching("createClient")
        cache.get("/clients")          # None
    """

    def __init__(
        self,
        *,
        clock: Clock = now_ms,
        sweep_threshold: int = CACHE_SWEEP_THRESHOLD,
    ) -> None:
        """Initialize an empty cache.

        Args:
            clock: Epoch-milliseconds source.
            sweep_threshold: Size above which writes sweep expired entries.
        """
        self._clock = clock
        self._sweep_threshold = sweep_threshold
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0
        self._lock = Lock()

    def lookup(self, key: str) -> CacheEntry | None:
        """Return the live entry for key, counting a hit or a miss.

        Args:
            key: Cache key.

        Returns:
            Live CacheEntry, or None (absent or expired; expired is deleted).
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not entry.is_live(now):
                del self._entries[key]
                entry = None
            if entry is None:
                self._misses += 1
            else:
                self._hits += 1
            return entry

    def get(self, key: str) -> Any | None:
        """Return cached data for key, or None when absent or expired."""
        entry = self.lookup(key)
        return entry.data if entry is not None else None

    def set(
        self,
        key: str,
        data: Any,
        ttl_seconds: int,
        tags: Iterable[str] = (),
    ) -> CacheEntry:
        """Store data under key, replacing any existing entry.

        Args:
            key: Cache key.
            data: Data to cache.
            ttl_seconds: Seconds until the entry expires.
            tags: Tags used for invalidation matching.

        Returns:
            The stored CacheEntry.
        """
        now = self._clock()
        entry = CacheEntry(
            key=key,
            data=data,
            expires_at_ms=now + ttl_seconds * 1000,
            tags=frozenset(tags),
        )
        with self._lock:
            self._entries[key] = entry
            if len(self._entries) > self._sweep_threshold:
                self._sweep_locked(now)
        return entry

    def invalidate(self, key: str) -> bool:
        """Remove one key. Returns True if it was present."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def invalidate_tags(self, tags: Iterable[str]) -> list[str]:
        """Remove entries carrying any of the given tags (exact match).

        Returns:
            Removed keys.
        """
        wanted = {tag.lower() for tag in tags}
        with self._lock:
            removed = [
                key
                for key, entry in self._entries.items()
                if any(tag.lower() in wanted for tag in entry.tags)
            ]
            for key in removed:
                del self._entries[key]
        return removed

    def invalidate_matching(self, name: str) -> list[str]:
        """Remove entries whose tags match a mutation name.

        Uses substring matching of each tag's singular stem against the name
        (see tag_matches), so it can remove more than strictly necessary.

        Args:
            name: Mutation identifying name.

        Returns:
            Removed keys.
        """
        with self._lock:
            removed = [
                key
                for key, entry in self._entries.items()
                if any(tag_matches(tag, name) for tag in entry.tags)
            ]
            for key in removed:
                del self._entries[key]
        return removed

    def sweep(self) -> int:
        """Remove all expired entries. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            return self._sweep_locked(now)

    def clear(self) -> None:
        """Drop every entry and reset hit/miss counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def stats(self) -> CacheStats:
        """Snapshot of size and hit/miss counters."""
        with self._lock:
            return CacheStats(
                size=len(self._entries), hits=self._hits, misses=self._misses
            )

    def keys(self) -> list[str]:
        """Stored keys (including entries that expired but were not swept)."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, key: object) -> bool:
        """Live presence check that does not count as a hit or miss."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key) if isinstance(key, str) else None
            return entry is not None and entry.is_live(now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def _sweep_locked(self, now: int) -> int:
        expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)
