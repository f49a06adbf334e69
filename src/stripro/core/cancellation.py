"""Cooperative cancellation for in-flight API calls.

A CancellationToken is handed to a call through RequestOptions. The client
checks it before rate limiting and dispatch, between retry attempts, and
before writing to the cache. Waiters (the retry backoff) are woken as soon
as the token is cancelled, including when cancel() is called from another
thread.

Examples:
    >>> token = client.create_abort_controller()
    >>> task = asyncio.create_task(
    ...     client.get("/reports", RequestOptions(cancel_token=token))
    ... )
    >>> token.cancel("user navigated away")
"""

from __future__ import annotations

import asyncio
import threading


class CancellationToken:
    """Thread-safe cancellation token for cooperative cancellation.

    Once cancelled a token stays cancelled; create a new token per logical
    operation.
    """

    def __init__(self) -> None:
        """Initialize a new, uncancelled token."""
        self._is_cancelled = threading.Event()
        self._lock = threading.Lock()
        self._reason: str | None = None
        self._waiters: list[tuple[asyncio.AbstractEventLoop, asyncio.Event]] = []

    @property
    def reason(self) -> str | None:
        """Reason given to cancel(), if any."""
        return self._reason

    def cancel(self, reason: str | None = None) -> None:
        """Signal that cancellation has been requested.

        Args:
            reason: Optional human-readable reason, surfaced in the
                CANCELLED error message.
        """
        with self._lock:
            if self._is_cancelled.is_set():
                return
            self._reason = reason
            self._is_cancelled.set()
            waiters, self._waiters = self._waiters, []

        for loop, event in waiters:
            if not loop.is_closed():
                loop.call_soon_threadsafe(event.set)

    def is_cancelled(self) -> bool:
        """Check if cancellation has been requested.

        Returns:
            True if cancellation has been requested, False otherwise.
        """
        return self._is_cancelled.is_set()

    async def wait(self) -> None:
        """Block the calling task until the token is cancelled."""
        loop = asyncio.get_running_loop()
        event = asyncio.Event()
        with self._lock:
            if self._is_cancelled.is_set():
                return
            self._waiters.append((loop, event))
        try:
            await event.wait()
        finally:
            with self._lock:
                if (loop, event) in self._waiters:
                    self._waiters.remove((loop, event))
