"""Response envelope and error payload schemas.

Every successful backend response is an Envelope; the client returns its
``data`` member. Failed responses may carry an ErrorPayload body whose
``message`` and ``details`` are copied into the raised ApiError.

Wire example:
    {
        "data": [{"id": "1", "name": "Acme Corporation"}],
        "success": true,
        "timestamp": "2024-01-20T15:30:00Z",
        "meta": {"total": 1, "page": 1, "limit": 50, "hasMore": false}
    }
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from stripro.core.errors.api_error import utc_now_iso

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """Pagination metadata for list responses.

    Attributes:
        total: Total items available.
        page: Current page number.
        limit: Items per page.
        has_more: Whether another page exists.
    """

    model_config = ConfigDict(populate_by_name=True)

    total: int | None = Field(None, description="Total items available")
    page: int | None = Field(None, description="Current page number")
    limit: int | None = Field(None, description="Items per page")
    has_more: bool | None = Field(None, alias="hasMore", description="More pages exist")


class Envelope(BaseModel, Generic[T]):
    """Uniform wrapper for successful responses.

    Unknown top-level keys are kept in ``model_extra`` (GraphQL results carry
    ``errors`` next to ``data``).

    Attributes:
        data: Response payload returned to the caller.
        message: Optional server message.
        success: Server-reported success flag.
        timestamp: ISO-8601 server timestamp.
        meta: Pagination metadata for list endpoints.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    data: T = Field(..., description="Response payload")
    message: str | None = Field(None, description="Optional server message")
    success: bool = Field(True, description="Server-reported success flag")
    timestamp: str = Field(default_factory=utc_now_iso, description="ISO-8601 timestamp")
    meta: PaginationMeta | None = Field(None, description="Pagination metadata")

    def with_data(self, data: Any) -> "Envelope[Any]":
        """Return a copy carrying different data (for response interceptors)."""
        return self.model_copy(update={"data": data})


class ErrorPayload(BaseModel):
    """Error body a backend may send with a non-2xx status."""

    model_config = ConfigDict(extra="allow")

    message: str | None = None
    details: dict[str, Any] | None = None
