"""In-process response cache.

Usage:
    from stripro.infrastructure.cache import ResponseCache, build_cache_key
"""

from stripro.infrastructure.cache.cache_keys import (
    build_cache_key,
    canonical_json,
    default_tags,
    tag_matches,
)
from stripro.infrastructure.cache.response_cache import ResponseCache

__all__ = [
    "ResponseCache",
    "build_cache_key",
    "canonical_json",
    "default_tags",
    "tag_matches",
]
