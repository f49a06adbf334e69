"""Bounded retry with exponential backoff (tenacity).

Attempt 1 runs immediately. An attempt is retried when:
    - the transport returned Failure(TransportError)
    - the transport raised (network error, TimeoutError, ...)
    - the attempt exceeded its per-attempt timeout
    - the server answered 500-599

Any other answer (2xx, 3xx, 4xx) is returned at once. 4xx is never retried.

Between attempts tenacity waits ``backoff_base_ms * 2 ** (n - 1)`` after
attempt n (1 s, 2 s, 4 s ... with the default base). Worst case:
``max_retries + 1`` attempts.

Both the in-flight attempt and the backoff wait are raced against the call's
cancellation token, so cancelling a call returns immediately whatever it is
doing.

On exhaustion the last outcome is returned: a 5xx as Success (the runtime
turns it into an HTTP ApiError), a transport failure as Failure.

asyncio.CancelledError is never swallowed.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from stripro.core.cancellation import CancellationToken
from stripro.core.constants import RETRY_BACKOFF_BASE_MS
from stripro.core.enums import ErrorCode
from stripro.core.result import Failure, Result, Success
from stripro.domain.errors import CancellationError, TransportError
from stripro.domain.protocols import LoggerProtocol
from stripro.domain.value_objects import TransportResponse

type TransportCall = Callable[[], Awaitable[Result[TransportResponse, TransportError]]]
type Sleep = Callable[[float], Awaitable[None]]
type RetryOutcome = Result[TransportResponse, TransportError | CancellationError]


class _TokenCancelled(Exception):
    """The cancellation token won a race; unwinds the tenacity loop."""


class RetryExecutor:
    """Runs a transport call with bounded retries.

    Attributes:
        backoff_base_ms: Backoff unit in milliseconds.

    Example:
        >>> executor = RetryExecutor(sleep=fake_sleep)
        >>> outcome = await executor.execute(
        ...     lambda: transport.send(request), max_retries=3
        ... )
    """

    def __init__(
        self,
        *,
        backoff_base_ms: int = RETRY_BACKOFF_BASE_MS,
        sleep: Sleep = asyncio.sleep,
        logger: LoggerProtocol | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            backoff_base_ms: Backoff unit in milliseconds.
            sleep: Awaitable sleep taking seconds (asyncio.sleep by default).
            logger: Logger for retry events; silent when None.
        """
        self.backoff_base_ms = backoff_base_ms
        self._sleep = sleep
        self._logger = logger

    async def execute(
        self,
        call: TransportCall,
        max_retries: int,
        *,
        cancel_token: CancellationToken | None = None,
        timeout_ms: int | None = None,
        url: str | None = None,
    ) -> RetryOutcome:
        """Run ``call`` up to ``max_retries + 1`` times.

        Args:
            call: Zero-argument coroutine function performing one attempt.
            max_retries: Retries after the first attempt (>= 0).
            cancel_token: Token raced against every attempt and backoff.
            timeout_ms: Per-attempt timeout; None disables it.
            url: Request URL, for logs and timeout errors.

        Returns:
            Success(TransportResponse): Non-retryable answer, or the last 5xx.
            Failure(TransportError): Last transport failure after exhaustion.
            Failure(CancellationError): The token was cancelled; ``attempts``
                counts the attempts that completed.
        """
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")

        completed = 0

        async def attempt() -> Result[TransportResponse, TransportError]:
            nonlocal completed
            outcome = await self._until_cancelled(
                self._attempt(call, timeout_ms=timeout_ms, url=url), cancel_token
            )
            completed += 1
            return outcome

        async def backoff(seconds: float) -> None:
            await self._until_cancelled(self._sleep(seconds), cancel_token)

        def log_retry(retry_state: RetryCallState) -> None:
            if self._logger is None or retry_state.outcome is None:
                return
            delay = retry_state.next_action.sleep if retry_state.next_action else 0
            self._logger.warning(
                "api_retry_scheduled",
                url=url,
                attempt=retry_state.attempt_number,
                max_attempts=max_retries + 1,
                delay_ms=round(delay * 1000),
                reason=self._describe(retry_state.outcome.result()),
            )

        def give_up(retry_state: RetryCallState) -> RetryOutcome:
            outcome = retry_state.outcome.result()
            if self._logger is not None and max_retries > 0:
                self._logger.warning(
                    "api_retries_exhausted",
                    url=url,
                    attempts=retry_state.attempt_number,
                    reason=self._describe(outcome),
                )
            return outcome

        retrying = AsyncRetrying(
            stop=stop_after_attempt(max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff_base_ms / 1000, exp_base=2),
            retry=retry_if_result(self._should_retry),
            sleep=backoff,
            before_sleep=log_retry,
            retry_error_callback=give_up,
            reraise=True,
        )
        try:
            return await retrying(attempt)
        except _TokenCancelled:
            return self._cancelled(completed)

    # -------------------------------------------------------------------------
    # Private helpers
    # -------------------------------------------------------------------------

    async def _attempt(
        self, call: TransportCall, *, timeout_ms: int | None, url: str | None
    ) -> Result[TransportResponse, TransportError]:
        try:
            if timeout_ms is None:
                return await call()
            async with asyncio.timeout(timeout_ms / 1000):
                return await call()
        except TimeoutError:
            return Failure(
                error=TransportError(
                    code=ErrorCode.TIMEOUT,
                    message=f"Request timed out after {timeout_ms}ms",
                    url=url,
                    is_timeout=True,
                )
            )
        except Exception as e:
            return Failure(
                error=TransportError(
                    code=ErrorCode.NETWORK_ERROR,
                    message=f"Network error: {e}",
                    url=url,
                    details={"errorType": type(e).__name__},
                )
            )

    @staticmethod
    async def _until_cancelled[T](
        work: Coroutine[Any, Any, T], cancel_token: CancellationToken | None
    ) -> T:
        """Await ``work`` unless the token is cancelled first.

        Raises:
            _TokenCancelled: The token was (or became) cancelled; ``work`` is
                cancelled and awaited before this is raised.
        """
        if cancel_token is None:
            return await work
        if cancel_token.is_cancelled():
            work.close()
            raise _TokenCancelled

        task = asyncio.ensure_future(work)
        watcher = asyncio.ensure_future(cancel_token.wait())
        try:
            await asyncio.wait({task, watcher}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (task, watcher):
                if not pending.done():
                    pending.cancel()
            await asyncio.gather(task, watcher, return_exceptions=True)

        if task.cancelled():
            raise _TokenCancelled
        return task.result()

    @staticmethod
    def _should_retry(outcome: Result[TransportResponse, TransportError]) -> bool:
        match outcome:
            case Success(value=response):
                return response.is_server_error
            case Failure():
                return True
        return False

    @staticmethod
    def _cancelled(attempts: int) -> Failure[CancellationError]:
        return Failure(
            error=CancellationError(
                code=ErrorCode.CANCELLED,
                message="Request was cancelled",
                attempts=attempts,
            )
        )

    @staticmethod
    def _describe(outcome: RetryOutcome | None) -> str:
        match outcome:
            case Success(value=response):
                return f"HTTP {response.status_code}"
            case Failure(error=error):
                return error.code.value
        return "unknown"
