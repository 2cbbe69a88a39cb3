"""Domain Events related to API calls and resilience.

Emitted when calls are deferred by the local rate limiter, issued, retried
after a 429, completed, or fail in transport.
"""

from dataclasses import dataclass, field
import time
from typing import Optional


@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass


@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when an HTTP request is about to be sent."""
    endpoint: str  # e.g. 'GET /customers/cus_1'
    attempt_number: int = 1
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallCompleted(DomainEvent):
    """Event triggered when a response other than 429 arrives (any status)."""
    endpoint: str
    status_code: int
    latency_ms: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when the transport raises before any response."""
    endpoint: str
    error_type: str
    error_message: str
    timestamp: float = field(default_factory=time.time)


@dataclass
class ApiCallDeferred(DomainEvent):
    """Event triggered when the local rate limiter delayed a call."""
    endpoint: str
    wait_time_seconds: float
    timestamp: float = field(default_factory=time.time)


@dataclass
class RetryScheduled(DomainEvent):
    """Event triggered when the remote service answered 429 and a retry is scheduled."""
    endpoint: str
    attempt_number: int
    delay_seconds: float
    retry_after_header: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
