"""Implementation of a rate limiter.

Controls the frequency of outgoing requests so the client stays under the
remote API's request ceiling. Uses a sliding window over the timestamps of
recently admitted calls.
"""

import time
import asyncio
import logging
from collections import deque
from typing import Awaitable, Callable, Deque

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 25          # Max 25 requests...
DEFAULT_TIME_WINDOW_SECONDS = 1.0  # ...per second
DEFAULT_SAFETY_MARGIN_SECONDS = 0.05

class RateLimiter:
    """Sliding window rate limiter.

    Each instance owns its own timestamp log, so clients built with different
    credentials never share a budget. Admission is serialized with an
    asyncio.Lock that is held across the wait, which keeps the aggregate rate
    of concurrent callers under the ceiling.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        time_window: float = DEFAULT_TIME_WINDOW_SECONDS,
        safety_margin: float = DEFAULT_SAFETY_MARGIN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initializes the rate limiter.

        Args:
            max_requests: Maximum number of requests allowed in the time window.
            time_window: The time window in seconds.
            safety_margin: Extra seconds added to every computed wait.
            clock: Monotonic time source, in seconds.
            sleep: Coroutine used to suspend the caller.
        """
        self.max_requests = max_requests
        self.time_window = time_window
        self.safety_margin = safety_margin
        self.timestamps: Deque[float] = deque()
        self._clock = clock
        self._sleep = sleep
        self._lock = asyncio.Lock()
        logger.info(f"RateLimiter initialized: {max_requests} requests / {time_window} seconds")

    def _cleanup_timestamps(self, now: float) -> None:
        """Removes timestamps that fell out of the window."""
        while self.timestamps and now - self.timestamps[0] >= self.time_window:
            self.timestamps.popleft()

    async def admit(self) -> float:
        """Waits until a request is permitted, then records it.

        Returns:
            The number of seconds the caller was suspended (0.0 if none).
        """
        async with self._lock:
            now = self._clock()
            self._cleanup_timestamps(now)

            waited = 0.0
            if len(self.timestamps) >= self.max_requests:
                oldest_timestamp = self.timestamps[0]
                wait_time = self.time_window - (now - oldest_timestamp) + self.safety_margin
                if wait_time > 0:
                    logger.debug(f"Rate limit reached. Waiting for {wait_time:.3f} seconds.")
                    await self._sleep(wait_time)
                    waited = wait_time

            self.timestamps.append(self._clock())
            return waited
