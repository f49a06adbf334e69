"""Base domain error class for Railway-Oriented Programming.

DomainError is the base for failures that flow through the pipeline as data
(inside Result types) before they reach the caller. It does NOT inherit from
Exception; the client runtime converts it into an ApiError at the boundary.

Usage:
    @dataclass(frozen=True, slots=True, kw_only=True)
    class TransportError(DomainError):
        is_timeout: bool = False
"""

from dataclasses import dataclass
from typing import Any

from stripro.core.enums import ErrorCode


@dataclass(frozen=True, slots=True, kw_only=True)
class DomainError:
    """Base domain error (does NOT inherit from Exception).

    Attributes:
        code: Machine-readable error code (enum).
        message: Human-readable error message.
        details: Optional context for debugging.
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] | None = None

    def __str__(self) -> str:
        """String representation of error."""
        return f"{self.code.value}: {self.message}"
