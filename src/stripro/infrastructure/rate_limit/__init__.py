"""Client-side rate limiting."""

from stripro.infrastructure.rate_limit.fixed_window import FixedWindowRateLimiter

__all__ = ["FixedWindowRateLimiter"]
