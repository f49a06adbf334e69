"""Fixed-window rate limit value objects.

Usage:
    from stripro.domain.value_objects import RateLimitConfig

    # 2 requests per second, per endpoint
    config = RateLimitConfig(max_requests=2, window_ms=1000)
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitConfig:
    """Fixed-window rate limit configuration (value object).

    Attributes:
        max_requests: Requests allowed per window.
        window_ms: Window length in milliseconds.

    Raises:
        ValueError: If max_requests <= 0 or window_ms <= 0.
    """

    max_requests: int
    window_ms: int

    def __post_init__(self) -> None:
        """Validate configuration after initialization.

        Raises:
            ValueError: If any numeric field is invalid.
        """
        if self.max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {self.max_requests}")
        if self.window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {self.window_ms}")


@dataclass(slots=True, kw_only=True)
class RateLimitEntry:
    """Counter for one key within its current window.

    Mutable: owned and updated by the limiter under its lock.

    Attributes:
        key: Rate limit key (the endpoint).
        count: Requests admitted in the current window.
        window_reset_at_ms: Epoch milliseconds when the window ends.
    """

    key: str
    count: int
    window_reset_at_ms: int


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitResult:
    """Result of a rate limit check.

    A denial is not an error: it is a successful check with allowed=False.

    Attributes:
        allowed: Whether the request is allowed.
        remaining: Requests left in the current window.
        limit: Maximum requests per window.
        retry_after_ms: Milliseconds until the window resets (0 if allowed).
        reset_at_ms: Epoch milliseconds when the window resets.
    """

    allowed: bool
    remaining: int = 0
    limit: int = 0
    retry_after_ms: int = 0
    reset_at_ms: int = 0
