"""Defines common Value Objects used across the client.

These objects represent simple values like resource identifiers, HTTP verbs
and request parameters, keeping signatures readable and consistent.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, NewType, Optional, TypedDict

# === Resource Identifiers ===

# Using NewType for semantic clarity, although they are strings at runtime.
CustomerId = NewType("CustomerId", str)          # cus_xxx
ProductId = NewType("ProductId", str)            # prod_xxx
PriceId = NewType("PriceId", str)                # price_xxx
SubscriptionId = NewType("SubscriptionId", str)  # sub_xxx
InvoiceId = NewType("InvoiceId", str)            # in_xxx

# === Request Context ===
HttpMethod = NewType("HttpMethod", str)          # 'GET', 'POST', 'DELETE'
ApiPath = NewType("ApiPath", str)                # Path below the base URL, e.g. '/customers/cus_1'
SecretKey = NewType("SecretKey", str)            # Never logged

# Parameter values may be nested (dicts/lists) and are flattened into
# bracket-notation keys by the request builder. None means "not supplied".
RequestParams = Dict[str, Any]

# --- Structured Data ---

class RateLimitPolicy(TypedDict):
    """Value Object describing the client-side sliding window."""
    max_requests: int
    time_window: float
    safety_margin: float


@dataclass(frozen=True)
class PendingRequest:
    """A request as the resource operations describe it, before encoding."""
    method: HttpMethod
    path: ApiPath
    params: Optional[RequestParams] = field(default=None)
