"""HTTP methods and request classification."""

from enum import Enum


class HttpMethod(str, Enum):
    """HTTP methods supported by the API client."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def default_kind(self) -> "RequestKind":
        """GET reads; everything else mutates unless a caller says otherwise."""
        return RequestKind.READ if self is HttpMethod.GET else RequestKind.MUTATION


class RequestKind(Enum):
    """Whether a call reads (cacheable) or mutates (invalidates the cache).

    GraphQL queries are POSTs but classified as READ.
    """

    READ = "read"
    MUTATION = "mutation"
