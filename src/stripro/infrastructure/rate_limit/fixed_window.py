"""Fixed-window rate limiter.

Counts requests per key (the endpoint) inside a window that starts with the
first request and lasts ``window_ms``. A request arriving after the window
ended opens a new window. Purely in-process: nothing is shared with other
processes or with the server.

Keys include the query string, so windows for many distinct keys can pile
up. Opening a window while more than ``sweep_threshold`` are stored drops
every expired one.

Usage:
    limiter = FixedWindowRateLimiter()
    result = limiter.check("/reports", RateLimitConfig(max_requests=2, window_ms=1000))
    if not result.allowed:
        wait(result.retry_after_ms)
"""

from __future__ import annotations

from threading import Lock

from stripro.core.clock import Clock, now_ms
from stripro.core.constants import RATE_LIMIT_SWEEP_THRESHOLD
from stripro.domain.value_objects import RateLimitConfig, RateLimitEntry, RateLimitResult


class FixedWindowRateLimiter:
    """Per-key fixed-window request counter.

    Check and increment happen in a single critical section, so concurrent
    callers can never both take the last slot of a window.

    Args:
        clock: Epoch-milliseconds source.
        sweep_threshold: Stored windows above which expired ones are dropped.
    """

    def __init__(
        self,
        *,
        clock: Clock = now_ms,
        sweep_threshold: int = RATE_LIMIT_SWEEP_THRESHOLD,
    ) -> None:
        self._clock = clock
        self._sweep_threshold = sweep_threshold
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = Lock()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def check(self, key: str, config: RateLimitConfig) -> RateLimitResult:
        """Admit or deny one request for key.

        Args:
            key: Rate limit key.
            config: Window size and request budget.

        Returns:
            RateLimitResult: allowed=True with the remaining budget, or
                allowed=False with retry_after_ms until the window resets.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or now > entry.window_reset_at_ms:
                entry = RateLimitEntry(
                    key=key, count=1, window_reset_at_ms=now + config.window_ms
                )
                self._entries[key] = entry
                if len(self._entries) > self._sweep_threshold:
                    self._sweep_locked(now)
                return self._allowed(entry, config)

            if entry.count < config.max_requests:
                entry.count += 1
                return self._allowed(entry, config)

            return RateLimitResult(
                allowed=False,
                remaining=0,
                limit=config.max_requests,
                retry_after_ms=entry.window_reset_at_ms - now,
                reset_at_ms=entry.window_reset_at_ms,
            )

    def peek(self, key: str) -> RateLimitEntry | None:
        """Return a copy of the current entry for key, if any."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            return RateLimitEntry(
                key=entry.key,
                count=entry.count,
                window_reset_at_ms=entry.window_reset_at_ms,
            )

    def reset(self, key: str) -> bool:
        """Forget the window for key. Returns True if one existed."""
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Forget every window."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------

    def _sweep_locked(self, now: int) -> int:
        expired = [
            key
            for key, entry in self._entries.items()
            if now > entry.window_reset_at_ms
        ]
        for key in expired:
            del self._entries[key]
        return len(expired)

    @staticmethod
    def _allowed(entry: RateLimitEntry, config: RateLimitConfig) -> RateLimitResult:
        return RateLimitResult(
            allowed=True,
            remaining=max(config.max_requests - entry.count, 0),
            limit=config.max_requests,
            retry_after_ms=0,
            reset_at_ms=entry.window_reset_at_ms,
        )
