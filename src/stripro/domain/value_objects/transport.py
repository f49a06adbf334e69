"""Transport request/response value objects."""

from dataclasses import dataclass, field
from typing import Any

from stripro.core.enums import HttpMethod


@dataclass(frozen=True, slots=True, kw_only=True)
class TransportRequest:
    """One dispatch attempt's worth of request data.

    Attributes:
        method: HTTP method.
        url: Absolute URL (base URL + endpoint).
        headers: Final merged headers.
        json: JSON-serializable body, or None.
        timeout_ms: Per-attempt timeout.
    """

    method: HttpMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    json: Any = None
    timeout_ms: int | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class TransportResponse:
    """An HTTP answer, whatever its status.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers.
        body: Decoded JSON body, or None when the body is not JSON.
        text: Raw body text (used for error messages).
        url: Final request URL.
    """

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    text: str = ""
    url: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600
