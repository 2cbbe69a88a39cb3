"""Service for executing API calls with automatic 429 retries.

Every physical attempt, retries included, first passes the local rate
limiter. A 429 answer from the remote service is retried after the delay the
server asks for (Retry-After, in seconds) with no retry ceiling: sustained
throttling means added latency, never a surfaced failure. Other responses are
handed back to the caller for mapping; transport exceptions propagate.
"""

import logging
import asyncio
import math
import time
from typing import Any, Awaitable, Callable, Optional

import httpx

from stripetools.infrastructure.resilience.rate_limiter import RateLimiter
from stripetools.domain.events.api_events import (
    ApiCallInitiated, ApiCallCompleted, ApiCallFailed,
    ApiCallDeferred, RetryScheduled
)

logger = logging.getLogger(__name__)

RATE_LIMITED_STATUS = 429
RETRY_AFTER_HEADER = "Retry-After"
DEFAULT_RETRY_AFTER_SECONDS = 2.0


def dispatch_event(event: Any) -> None:
    """Publishes a domain event. Events are only logged for now."""
    logger.debug(f"EVENT: {event}")


class ApiRetryService:
    """Handles API call execution with rate limiting and 429 retries."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        default_retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initializes the ApiRetryService.

        Args:
            rate_limiter: The rate limiter consulted before every attempt.
            default_retry_after: Delay in seconds when a 429 has no usable Retry-After header.
            sleep: Coroutine used to suspend between attempts.
        """
        self.rate_limiter = rate_limiter
        self.default_retry_after = default_retry_after
        self._sleep = sleep

        logger.info(f"ApiRetryService initialized: default_retry_after={default_retry_after}s, no retry ceiling")

    def retry_delay(self, response: httpx.Response) -> float:
        """Reads the server-supplied delay from a 429 response."""
        header = response.headers.get(RETRY_AFTER_HEADER)
        if header is None:
            return self.default_retry_after
        try:
            delay = float(header)
        except ValueError:
            logger.warning(f"Unparseable {RETRY_AFTER_HEADER} header '{header}'. Using {self.default_retry_after}s.")
            return self.default_retry_after
        if not math.isfinite(delay):
            logger.warning(f"Non-finite {RETRY_AFTER_HEADER} header '{header}'. Using {self.default_retry_after}s.")
            return self.default_retry_after
        return max(0.0, delay)

    async def execute(
        self,
        send: Callable[[], Awaitable[httpx.Response]],
        endpoint: Optional[str] = None,
    ) -> httpx.Response:
        """Sends a request until the remote service stops answering 429.

        Args:
            send: Zero-argument coroutine factory issuing the same HTTP request each time.
            endpoint: Label for logs and events, e.g. 'GET /customers'.

        Returns:
            The first response whose status is not 429.

        Raises:
            httpx.HTTPError: If the transport fails; not retried.
        """
        effective_endpoint = endpoint or getattr(send, "__name__", "request")
        attempt = 0

        while True:
            attempt += 1

            # 1. Wait for rate limit permission (retries take a new slot)
            waited = await self.rate_limiter.admit()
            if waited > 0:
                dispatch_event(ApiCallDeferred(endpoint=effective_endpoint, wait_time_seconds=waited))

            # 2. Issue the call
            dispatch_event(ApiCallInitiated(endpoint=effective_endpoint, attempt_number=attempt))
            start_time = time.perf_counter()
            try:
                response = await send()
            except httpx.HTTPError as e:
                logger.error(f"Transport error calling {effective_endpoint} on attempt {attempt}: {type(e).__name__}: {e}")
                dispatch_event(ApiCallFailed(endpoint=effective_endpoint, error_type=type(e).__name__, error_message=str(e)))
                raise
            latency_ms = (time.perf_counter() - start_time) * 1000

            # 3. Remote throttling: wait as instructed and resend
            if response.status_code == RATE_LIMITED_STATUS:
                delay = self.retry_delay(response)
                logger.warning(
                    f"Rate limited by remote service on {effective_endpoint} (attempt {attempt}). "
                    f"Retrying in {delay:.2f}s..."
                )
                dispatch_event(RetryScheduled(
                    endpoint=effective_endpoint,
                    attempt_number=attempt,
                    delay_seconds=delay,
                    retry_after_header=response.headers.get(RETRY_AFTER_HEADER),
                ))
                await self._sleep(delay)
                continue

            dispatch_event(ApiCallCompleted(endpoint=effective_endpoint, status_code=response.status_code, latency_ms=latency_ms))
            return response
