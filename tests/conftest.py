"""Pytest configuration and shared test doubles.

Provides:
1. FakeClock: epoch-milliseconds clock advanced explicitly by tests
2. RecordedSleep: backoff sleep that records delays and advances the clock
3. ScriptedTransport: TransportProtocol fake replaying scripted outcomes
4. RecordingLogger: LoggerProtocol fake capturing structured events
5. Response builders (ok, status) for TransportResponse values

Simulated time keeps every test deterministic: nothing here waits on the
wall clock.
"""

import asyncio
import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import pytest

from stripro.core.config import Settings
from stripro.core.enums import Environment
from stripro.core.result import Failure, Success
from stripro.domain.errors import TransportError
from stripro.domain.value_objects import TransportRequest, TransportResponse

START_MS = 1_705_764_600_000  # 2024-01-20T15:30:00Z


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no I/O)")
    config.addinivalue_line(
        "markers", "integration: Integration tests (HTTP mocked at the httpx layer)"
    )


# =============================================================================
# Test doubles
# =============================================================================


class FakeClock:
    """Manually advanced epoch-milliseconds clock."""

    def __init__(self, start_ms: int = START_MS) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordedSleep:
    """Async sleep replacement recording each requested delay (seconds).

    When bound to a clock, sleeping advances it by the same amount.
    """

    def __init__(self, clock: FakeClock | None = None) -> None:
        self.delays: list[float] = []
        self._clock = clock

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self._clock is not None:
            self._clock.advance(int(seconds * 1000))
        await asyncio.sleep(0)


type Outcome = (
    TransportResponse
    | TransportError
    | BaseException
    | Callable[[TransportRequest], Any]
)


class ScriptedTransport:
    """Transport fake replaying outcomes in order.

    Each outcome may be:
        - TransportResponse: returned as Success
        - TransportError: returned as Failure
        - exception instance: raised
        - callable(request): called; its (possibly awaited) result is
          handled like the outcomes above

    When the script runs out, ``fallback`` is used if set; otherwise a
    NETWORK_ERROR failure is returned.
    """

    def __init__(self, *outcomes: Outcome) -> None:
        self._outcomes: list[Outcome] = list(outcomes)
        self.fallback: Outcome | None = None
        self.requests: list[TransportRequest] = []
        self.closed = False

    def queue(self, *outcomes: Outcome) -> None:
        self._outcomes.extend(outcomes)

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def send(self, request: TransportRequest):
        self.requests.append(request)
        if self._outcomes:
            outcome = self._outcomes.pop(0)
        elif self.fallback is not None:
            outcome = self.fallback
        else:
            from stripro.core.enums import ErrorCode

            outcome = TransportError(
                code=ErrorCode.NETWORK_ERROR, message="no scripted response"
            )

        if callable(outcome) and not isinstance(
            outcome, (TransportResponse, TransportError)
        ):
            outcome = outcome(request)
            if inspect.isawaitable(outcome):
                outcome = await outcome

        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, TransportError):
            return Failure(error=outcome)
        return Success(value=outcome)

    async def aclose(self) -> None:
        self.closed = True


@dataclass
class LogRecord:
    level: str
    event: str
    context: dict[str, Any] = field(default_factory=dict)


class RecordingLogger:
    """LoggerProtocol fake storing every record (bound loggers share storage)."""

    def __init__(
        self,
        context: dict[str, Any] | None = None,
        records: list[LogRecord] | None = None,
    ) -> None:
        self.context = context or {}
        self.records: list[LogRecord] = records if records is not None else []

    def _log(self, level: str, event: str, context: dict[str, Any]) -> None:
        self.records.append(LogRecord(level, event, {**self.context, **context}))

    def debug(self, message: str, /, **context: Any) -> None:
        self._log("debug", message, context)

    def info(self, message: str, /, **context: Any) -> None:
        self._log("info", message, context)

    def warning(self, message: str, /, **context: Any) -> None:
        self._log("warning", message, context)

    def error(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        if error is not None:
            context["error_type"] = type(error).__name__
        self._log("error", message, context)

    def critical(
        self, message: str, /, *, error: Exception | None = None, **context: Any
    ) -> None:
        if error is not None:
            context["error_type"] = type(error).__name__
        self._log("critical", message, context)

    def bind(self, **context: Any) -> "RecordingLogger":
        return RecordingLogger({**self.context, **context}, self.records)

    def with_context(self, **context: Any) -> "RecordingLogger":
        return self.bind(**context)

    def events(self) -> list[str]:
        return [record.event for record in self.records]

    def find(self, event: str) -> list[LogRecord]:
        return [record for record in self.records if record.event == event]


# =============================================================================
# Response builders
# =============================================================================


def ok(data: Any, status_code: int = 200, **extra: Any) -> TransportResponse:
    """2xx envelope response carrying ``data``."""
    body = {"data": data, "success": True, "timestamp": "2024-01-20T15:30:00Z", **extra}
    return TransportResponse(status_code=status_code, body=body, text=str(body))


def status(
    status_code: int, body: Any = None, url: str = ""
) -> TransportResponse:
    """Response with an arbitrary status and body."""
    return TransportResponse(
        status_code=status_code, body=body, text="" if body is None else str(body), url=url
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep(clock: FakeClock) -> RecordedSleep:
    return RecordedSleep(clock)


@pytest.fixture
def transport() -> ScriptedTransport:
    return ScriptedTransport()


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment."""
    return Settings(
        environment=Environment.TESTING,
        api_base_url="http://api.test",
        graphql_url="http://graphql.test/graphql",
        mcp_base_url="https://tunnel.ngrok-free.test",
        request_timeout_ms=5_000,
        request_retries=0,
    )


@pytest.fixture
def make_client(transport, logger, settings, clock, sleep):
    """Factory for ApiClient wired to the test doubles."""
    from stripro.infrastructure.api_client import ApiClient

    def _make(**overrides: Any) -> ApiClient:
        kwargs: dict[str, Any] = {
            "transport": transport,
            "logger": logger,
            "settings": settings,
            "clock": clock,
            "sleep": sleep,
        }
        kwargs.update(overrides)
        base_url = kwargs.pop("base_url", "http://api.test")
        return ApiClient(base_url, **kwargs)

    return _make
