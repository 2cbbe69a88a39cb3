"""Domain models for resources returned by the Stripe API.

These are TypedDicts: the decoded JSON body is handed back unchanged, the
shapes only document which fields callers can rely on. Nullable fields are
typed Optional (null is not the same as an empty string).
"""

from typing import Any, Dict, List, Optional, TypedDict


class StripeCustomer(TypedDict):
    id: str
    object: str  # 'customer'
    email: Optional[str]
    name: Optional[str]
    phone: Optional[str]
    description: Optional[str]
    created: int
    metadata: Dict[str, str]


class StripeProduct(TypedDict):
    id: str
    object: str  # 'product'
    name: str
    description: Optional[str]
    active: bool
    created: int
    metadata: Dict[str, str]


class PriceRecurring(TypedDict):
    interval: str  # day, week, month or year
    interval_count: int


class StripePrice(TypedDict):
    id: str
    object: str  # 'price'
    product: str
    unit_amount: Optional[int]  # Smallest currency unit
    currency: str
    active: bool
    recurring: Optional[PriceRecurring]
    created: int


class SubscriptionItem(TypedDict):
    id: str
    price: StripePrice


class SubscriptionItems(TypedDict):
    data: List[SubscriptionItem]


class StripeSubscription(TypedDict):
    """A subscription; `status` is reported as returned (active, canceled, past_due, ...)."""
    id: str
    object: str  # 'subscription'
    customer: str
    status: str
    current_period_start: int
    current_period_end: int
    created: int
    items: SubscriptionItems


class StripeInvoice(TypedDict):
    """An invoice; `status` is one of draft, open, paid, uncollectible or void."""
    id: str
    object: str  # 'invoice'
    customer: str
    status: str
    amount_due: int
    amount_paid: int
    currency: str
    created: int


class BalanceAmount(TypedDict):
    amount: int
    currency: str


class StripeBalance(TypedDict):
    object: str  # 'balance'
    available: List[BalanceAmount]
    pending: List[BalanceAmount]


class StripeDeleteResult(TypedDict):
    id: str
    object: str
    deleted: bool


class StripeList(TypedDict):
    """One page of a list endpoint. `data` is never guaranteed to be exhaustive."""
    object: str  # 'list'
    data: List[Any]
    has_more: bool
    url: str
