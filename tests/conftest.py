from typing import Callable, List, Optional

import httpx
import pytest
from typer.testing import CliRunner

from stripetools.infrastructure.config.settings import clear_test_config
from stripetools.infrastructure.resilience.api_retry import ApiRetryService
from stripetools.infrastructure.resilience.rate_limiter import RateLimiter
from stripetools.infrastructure.stripe.stripe_client import StripeClient

TEST_API_KEY = "sk_test_123"
TEST_BASE_URL = "https://api.stripe.test/v1"


class FakeClock:
    """Deterministic time source; sleeping advances the clock instead of blocking."""

    def __init__(self, start: float = 0.0):
        self.current = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += seconds


class RecordingHandler:
    """httpx.MockTransport handler that records requests and replays queued responses."""

    def __init__(self, responses: Optional[List[httpx.Response]] = None, default: Optional[Callable[[httpx.Request], httpx.Response]] = None):
        self.requests: List[httpx.Request] = []
        self.responses = list(responses or [])
        self.default = default

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        if self.default is not None:
            return self.default(request)
        return httpx.Response(200, json={})


def echo_resource(request: httpx.Request) -> httpx.Response:
    """Answers with a resource whose id is the last path segment."""
    resource_id = request.url.path.rstrip("/").split("/")[-1]
    return httpx.Response(200, json={"id": resource_id, "object": "customer", "email": None})


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def make_client(fake_clock: FakeClock):
    """Factory building a StripeClient wired to a mock transport and the fake clock."""
    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs) -> StripeClient:
        limiter = RateLimiter(clock=fake_clock, sleep=fake_clock.sleep)
        retry_service = ApiRetryService(rate_limiter=limiter, sleep=fake_clock.sleep)
        return StripeClient(
            api_key=kwargs.pop("api_key", TEST_API_KEY),
            base_url=TEST_BASE_URL,
            retry_service=retry_service,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
    return _make


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_test_config():
    """Keeps configuration overrides from leaking between tests."""
    yield
    clear_test_config()


@pytest.fixture
def recording_handler():
    """Returns the RecordingHandler class so tests can queue their own responses."""
    return RecordingHandler


@pytest.fixture
def echo_handler():
    return RecordingHandler(default=echo_resource)
