"""Result types for railway-oriented programming.

Transports and the retry executor report failures as data instead of
raising, so every failure path is explicit until the client runtime turns
it into an ApiError for the caller.

Usage:
    async def send(request: TransportRequest) -> Result[TransportResponse, TransportError]:
        ...

    match await transport.send(request):
        case Success(value=response):
            handle(response)
        case Failure(error=error):
            log(error)
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type


@dataclass(frozen=True, slots=True, kw_only=True)
class Success(Generic[T]):
    """Represents a successful operation result.

    Attributes:
        value: The successful result value.
    """

    value: T


@dataclass(frozen=True, slots=True, kw_only=True)
class Failure(Generic[E]):
    """Represents a failed operation result.

    Attributes:
        error: The error that occurred.
    """

    error: E


type Result[T, E] = Success[T] | Failure[E]
