"""Minimum spacing between external calls."""
import logging
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class MinIntervalLimiter:
    """
    Keeps at least `interval` seconds between marked calls.

    Call wait() before an external call and mark() after it ran. interval=0 disables waiting.
    """

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic, sleep: Callable[[float], None] = time.sleep):
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: Optional[float] = None

    def wait(self) -> float:
        """Sleep until the interval since the last mark() has passed. Returns seconds slept."""
        if self._last is None or self.interval <= 0:
            return 0.0
        remaining = self.interval - (self._clock() - self._last)
        if remaining <= 0:
            return 0.0
        logger.info("  [Rate limit] Waiting %.1fs...", remaining)
        self._sleep(remaining)
        return remaining

    def mark(self) -> None:
        self._last = self._clock()
