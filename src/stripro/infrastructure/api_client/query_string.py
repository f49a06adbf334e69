"""Query string construction for list endpoints.

Rules:
    - None values are omitted
    - Lists/tuples expand to repeated keys (status=a&status=b)
    - Booleans render as true/false
    - Nested mappings expand as key[sub]=value
    - Enums render their value

Example:
    >>> build_query_string({"page": 1, "status": ["active", "pending"], "q": None})
    '?page=1&status=active&status=pending'
    >>> build_query_string({})
    ''
"""

from collections.abc import Iterator, Mapping
from datetime import date
from enum import Enum
from typing import Any
from urllib.parse import urlencode


def build_query_string(params: Mapping[str, Any] | None) -> str:
    """Render params as "?a=1&b=2", or "" when nothing remains."""
    if not params:
        return ""
    pairs = [pair for key, value in params.items() for pair in _flatten(key, value)]
    if not pairs:
        return ""
    return f"?{urlencode(pairs)}"


def _flatten(key: str, value: Any) -> Iterator[tuple[str, str]]:
    if value is None:
        return
    if isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            yield from _flatten(f"{key}[{sub_key}]", sub_value)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _flatten(key, item)
    else:
        yield key, _render(value)


def _render(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)
