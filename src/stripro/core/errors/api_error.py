"""Caller-visible API error.

Every failure of a client call (HTTP error status, transport failure, local
rate limiting, cancellation, malformed response, failing interceptor) reaches
the caller as an ApiError. Its wire shape is:

    {"code": "404", "message": "...", "details": {...},
     "timestamp": "2024-01-20T15:30:00+00:00", "path": "https://..."}

Usage:
    try:
        await client.get("/clients/42")
    except ApiError as e:
        if e.code == "404":
            ...
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from stripro.core.enums import ErrorCode, ErrorKind


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(UTC).isoformat()


class ApiError(Exception):
    """Normalized API failure raised to callers.

    Attributes:
        code: HTTP status as a string ("404") or a local code ("RATE_LIMITED").
        message: Human-readable message.
        details: Optional structured context (server details, retryAfterMs).
        timestamp: ISO-8601 UTC time the error was produced.
        path: Request URL or endpoint, when known.
        kind: Retry classification (never changed after creation by the runtime).
    """

    def __init__(
        self,
        *,
        code: str | ErrorCode,
        message: str,
        kind: ErrorKind = ErrorKind.INTERNAL,
        details: dict[str, Any] | None = None,
        timestamp: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value if isinstance(code, ErrorCode) else str(code)
        self.message = message
        self.kind = kind
        self.details = details
        self.timestamp = timestamp or utc_now_iso()
        self.path = path

    @property
    def status_code(self) -> int | None:
        """HTTP status when the code is numeric, else None."""
        return int(self.code) if self.code.isdigit() else None

    @property
    def is_retryable(self) -> bool:
        return self.kind.is_retryable

    def with_updates(self, **changes: Any) -> ApiError:
        """Return a copy with the given fields replaced.

        Error interceptors use this to enrich an error without mutating the
        instance other interceptors have already seen.

        Args:
            **changes: Any of code, message, kind, details, timestamp, path.

        Returns:
            ApiError: New error; the original exception chain is preserved.
        """
        fields: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "kind": self.kind,
            "details": self.details,
            "timestamp": self.timestamp,
            "path": self.path,
        }
        unknown = set(changes) - set(fields)
        if unknown:
            raise TypeError(f"Unknown ApiError fields: {sorted(unknown)}")
        fields.update(changes)
        updated = ApiError(**fields)
        updated.__cause__ = self.__cause__
        return updated

    def to_dict(self) -> dict[str, Any]:
        """Wire representation of the error."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
            "path": self.path,
        }

    def __repr__(self) -> str:
        return (
            f"ApiError(code={self.code!r}, message={self.message!r}, "
            f"kind={self.kind.value!r}, path={self.path!r})"
        )

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"
