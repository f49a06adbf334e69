"""Cache key construction and invalidation matching.

Keys must be identical for identical calls:
    - REST reads: the endpoint including its query string
      ("/clients?limit=50&page=1")
    - Body-carrying reads (GraphQL queries): endpoint, then the canonical
      JSON of the body ("/graphql|{"query":"...","variables":{"a":1}}")

Canonical JSON sorts keys at every level, so variable order never changes
the key.

Invalidation matching is deliberately coarse: a tag matches a mutation name
when the tag's singular stem occurs anywhere in the name, ignoring case.
"clients" matches "createClient" and also "CreateClientNote".
"""

import json
from typing import Any
from urllib.parse import urlsplit


def canonical_json(value: Any) -> str:
    """Serialize value with sorted keys and compact separators.

    Args:
        value: JSON-serializable value.

    Returns:
        Deterministic JSON string.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def build_cache_key(endpoint: str, body: Any = None) -> str:
    """Build the cache key for a read call.

    Args:
        endpoint: Endpoint path, including any query string.
        body: Request body for body-carrying reads, or None.

    Returns:
        Cache key string.

    Example:
        >>> build_cache_key("/users?page=1")
        '/users?page=1'
        >>> build_cache_key("/graphql", {"variables": {"b": 2, "a": 1}, "query": "q"})
        '/graphql|{"query":"q","variables":{"a":1,"b":2}}'
    """
    if body is None:
        return endpoint
    return f"{endpoint}|{canonical_json(body)}"


def default_tags(endpoint: str) -> frozenset[str]:
    """Tag an entry with the first alphabetic path segment (its resource).

    Args:
        endpoint: Endpoint path ("/v1/clients/42?x=1").

    Returns:
        Single-element set with the resource name, or empty set.

    Example:
        >>> default_tags("/clients/42")
        frozenset({'clients'})
    """
    path = urlsplit(endpoint).path
    for segment in path.split("/"):
        if segment.isalpha():
            return frozenset({segment.lower()})
    return frozenset()


def tag_matches(tag: str, name: str) -> bool:
    """Whether a mutation name invalidates entries carrying ``tag``.

    Args:
        tag: Cache tag ("clients").
        name: Mutation identifying name (endpoint or GraphQL document).

    Returns:
        True when the tag's singular stem occurs in the name (case-insensitive).

    Matching ignores case so that endpoint names ("/clients/42") and
    camelCase GraphQL fields ("createClient") both match. The cost is extra
    invalidation: a document mentioning any identifier that contains a stem
    ("$userId") also clears that resource ("users").
    """
    stem = tag.lower()
    if stem.endswith("s"):
        stem = stem[:-1]
    return bool(stem) and stem in name.lower()
