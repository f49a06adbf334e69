"""Centralized constants for internal implementation details.

This module contains constants that are internal implementation details,
NOT environment-specific configuration. For environment-specific settings,
use `stripro.core.config` instead.

Example:
    >>> from stripro.core.constants import BEARER_PREFIX
    >>> header = f"{BEARER_PREFIX}{access_token}"
"""

# =============================================================================
# Headers
# =============================================================================

BEARER_PREFIX: str = "Bearer "
"""HTTP Authorization header prefix for Bearer tokens."""

AUTHORIZATION_HEADER: str = "Authorization"
"""Header installed by set_auth_token()."""

DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}
"""Headers every client sends unless overridden."""

USER_AGENT: str = "Stripro-Dashboard/1.0"
"""User agent sent to the MCP tool server."""


# =============================================================================
# Timeouts and retries
# =============================================================================

REQUEST_TIMEOUT_MS_DEFAULT: int = 30_000
"""Default per-attempt timeout in milliseconds."""

RETRY_BACKOFF_BASE_MS: int = 1_000
"""Backoff unit: attempt n waits 2**n * this many milliseconds."""


# =============================================================================
# Cache
# =============================================================================

CACHE_TTL_SECONDS_DEFAULT: int = 300
"""Default TTL for cached reads (5 minutes)."""

CACHE_SWEEP_THRESHOLD: int = 100
"""Store size above which a write triggers a sweep of expired entries."""


# =============================================================================
# Rate limiting
# =============================================================================

RATE_LIMIT_MAX_REQUESTS_DEFAULT: int = 100
"""Default requests allowed per window."""

RATE_LIMIT_WINDOW_MS_DEFAULT: int = 60_000
"""Default fixed-window length (1 minute)."""


RATE_LIMIT_SWEEP_THRESHOLD: int = 100
"""Window count above which opening a window drops expired windows."""


# =============================================================================
# Response Limits
# =============================================================================

RESPONSE_BODY_MAX_LENGTH: int = 500
"""Maximum length for response body in error messages (truncation limit)."""
