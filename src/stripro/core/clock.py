"""Wall-clock source used for cache expiry and rate-limit windows.

Components take a ``clock`` callable so tests can drive simulated time.
"""

import time
from collections.abc import Callable

type Clock = Callable[[], int]


def now_ms() -> int:
    """Current epoch time in milliseconds."""
    return time.time_ns() // 1_000_000
