"""Concrete implementation of the PaymentGateway interface for the Stripe API.

Every operation is a thin adapter: it assembles a parameter mapping, hands it
to the request builder, runs the request through the rate limiter and 429
retry loop, and returns the decoded JSON unchanged.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from stripetools.domain.interfaces.payment_gateway import PaymentGateway
from stripetools.domain.models.common import (
    CustomerId, InvoiceId, PriceId, ProductId, RequestParams, SubscriptionId
)
from stripetools.domain.models.resources import (
    StripeBalance, StripeCustomer, StripeDeleteResult, StripeInvoice,
    StripeList, StripePrice, StripeProduct, StripeSubscription
)
from stripetools.infrastructure.config.settings import (
    get_api_base_url, get_default_retry_after, get_rate_limit_policy,
    get_request_timeout, get_stripe_secret_key
)
from stripetools.infrastructure.resilience.api_retry import ApiRetryService
from stripetools.infrastructure.resilience.rate_limiter import RateLimiter
from stripetools.infrastructure.stripe.request_builder import PreparedRequest, RequestBuilder

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = (
    "STRIPE_SECRET_KEY environment variable is not set. "
    "Get your secret key from https://dashboard.stripe.com/apikeys"
)
NO_CONTENT_STATUS = 204


def page_size(limit: Optional[int]) -> Optional[int]:
    """A limit of 0 is treated as not supplied, leaving Stripe's default page size."""
    return limit or None


# --- Custom Exceptions ---
class StripeAPIError(RuntimeError):
    """Raised when the remote service answers with a non-2xx status other than 429."""
    def __init__(self, status_code: int, status_text: str, body: str):
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        super().__init__(f"Stripe API error ({status_code} {status_text}): {body}")


class StripeClient(PaymentGateway):
    """Rate-limited Stripe REST client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        rate_limiter: Optional[RateLimiter] = None,
        retry_service: Optional[ApiRetryService] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initializes the Stripe client.

        Args:
            api_key: Stripe secret key. Read from STRIPE_SECRET_KEY if None.
            base_url: API root, defaults to https://api.stripe.com/v1.
            rate_limiter: Sliding window limiter; one is built from config if None.
            retry_service: 429 retry loop; one is built around rate_limiter if None.
                It already owns a limiter, so it cannot be combined with rate_limiter.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).

        Raises:
            ValueError: If no secret key is available, or if both rate_limiter
                and retry_service are given.
        """
        if rate_limiter is not None and retry_service is not None:
            raise ValueError("Pass either rate_limiter or retry_service, not both.")

        effective_api_key = api_key or get_stripe_secret_key()
        if not effective_api_key:
            raise ValueError(MISSING_KEY_MESSAGE)

        self.request_builder = RequestBuilder(effective_api_key, base_url or get_api_base_url())

        if retry_service is None:
            if rate_limiter is None:
                policy = get_rate_limit_policy()
                rate_limiter = RateLimiter(
                    max_requests=policy['max_requests'],
                    time_window=policy['time_window'],
                    safety_margin=policy['safety_margin'],
                )
            retry_service = ApiRetryService(rate_limiter=rate_limiter, default_retry_after=get_default_retry_after())
        self.retry_service = retry_service
        self.rate_limiter = retry_service.rate_limiter

        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout if timeout is not None else get_request_timeout()),
            transport=transport,
        )
        logger.info(f"StripeClient initialized for {self.request_builder.base_url}")

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "StripeClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ----------------------------------------------------------
    # Transport & response mapping
    # ----------------------------------------------------------

    async def _request(self, method: str, path: str, params: Optional[RequestParams] = None) -> Any:
        prepared = self.request_builder.build(method, path, params)

        async def send() -> httpx.Response:
            return await self._send(prepared)

        response = await self.retry_service.execute(send, endpoint=f"{prepared.method} {path}")
        return self._parse_response(response)

    async def _send(self, prepared: PreparedRequest) -> httpx.Response:
        return await self._http.request(
            prepared.method,
            prepared.url,
            headers=prepared.headers,
            content=prepared.content,
        )

    def _parse_response(self, response: httpx.Response) -> Any:
        """Maps a non-429 response to a decoded body or a StripeAPIError."""
        if not response.is_success:
            try:
                body = response.text
            except (UnicodeDecodeError, LookupError) as e:
                logger.warning(f"Could not read error body for status {response.status_code}: {e}")
                body = ""
            logger.error(f"Stripe API returned {response.status_code} {response.reason_phrase}")
            raise StripeAPIError(response.status_code, response.reason_phrase, body)

        if response.status_code == NO_CONTENT_STATUS:
            return {}

        # Malformed JSON raises json.JSONDecodeError to the caller
        return response.json()

    # ----------------------------------------------------------
    # Customer Operations
    # ----------------------------------------------------------

    async def create_customer(
        self,
        email: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        description: Optional[str] = None,
    ) -> StripeCustomer:
        return await self._request("POST", "/customers", {
            "email": email, "name": name, "phone": phone, "description": description,
        })

    async def get_customer(self, customer_id: CustomerId) -> StripeCustomer:
        return await self._request("GET", f"/customers/{customer_id}")

    async def update_customer(
        self,
        customer_id: CustomerId,
        email: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        description: Optional[str] = None,
    ) -> StripeCustomer:
        return await self._request("POST", f"/customers/{customer_id}", {
            "email": email, "name": name, "phone": phone, "description": description,
        })

    async def list_customers(
        self,
        limit: Optional[int] = None,
        starting_after: Optional[CustomerId] = None,
        email: Optional[str] = None,
    ) -> StripeList:
        return await self._request("GET", "/customers", {
            "limit": page_size(limit), "starting_after": starting_after, "email": email,
        })

    async def delete_customer(self, customer_id: CustomerId) -> StripeDeleteResult:
        return await self._request("DELETE", f"/customers/{customer_id}")

    # ----------------------------------------------------------
    # Product Operations
    # ----------------------------------------------------------

    async def create_product(
        self,
        name: str,
        description: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> StripeProduct:
        return await self._request("POST", "/products", {
            "name": name, "description": description, "active": active,
        })

    async def get_product(self, product_id: ProductId) -> StripeProduct:
        return await self._request("GET", f"/products/{product_id}")

    async def list_products(self, limit: Optional[int] = None, active: Optional[bool] = None) -> StripeList:
        return await self._request("GET", "/products", {"limit": page_size(limit), "active": active})

    # ----------------------------------------------------------
    # Price Operations
    # ----------------------------------------------------------

    async def create_price(
        self,
        product_id: ProductId,
        unit_amount: int,
        currency: str,
        recurring_interval: Optional[str] = None,
    ) -> StripePrice:
        params: Dict[str, Any] = {
            "product": product_id,
            "unit_amount": unit_amount,
            "currency": currency,
        }
        if recurring_interval:
            params["recurring"] = {"interval": recurring_interval}
        return await self._request("POST", "/prices", params)

    async def get_price(self, price_id: PriceId) -> StripePrice:
        return await self._request("GET", f"/prices/{price_id}")

    async def list_prices(
        self,
        product_id: Optional[ProductId] = None,
        active: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> StripeList:
        return await self._request("GET", "/prices", {
            "product": product_id, "active": active, "limit": page_size(limit),
        })

    # ----------------------------------------------------------
    # Subscription Operations
    # ----------------------------------------------------------

    async def create_subscription(self, customer_id: CustomerId, price_id: PriceId) -> StripeSubscription:
        return await self._request("POST", "/subscriptions", {
            "customer": customer_id,
            "items": [{"price": price_id}],
        })

    async def get_subscription(self, subscription_id: SubscriptionId) -> StripeSubscription:
        return await self._request("GET", f"/subscriptions/{subscription_id}")

    async def cancel_subscription(self, subscription_id: SubscriptionId) -> StripeSubscription:
        return await self._request("DELETE", f"/subscriptions/{subscription_id}")

    async def list_subscriptions(
        self,
        customer_id: Optional[CustomerId] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> StripeList:
        return await self._request("GET", "/subscriptions", {
            "customer": customer_id, "status": status, "limit": page_size(limit),
        })

    # ----------------------------------------------------------
    # Invoice Operations
    # ----------------------------------------------------------

    async def get_invoice(self, invoice_id: InvoiceId) -> StripeInvoice:
        return await self._request("GET", f"/invoices/{invoice_id}")

    async def list_invoices(
        self,
        customer_id: Optional[CustomerId] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> StripeList:
        return await self._request("GET", "/invoices", {
            "customer": customer_id, "status": status, "limit": page_size(limit),
        })

    # ----------------------------------------------------------
    # Balance
    # ----------------------------------------------------------

    async def get_balance(self) -> StripeBalance:
        return await self._request("GET", "/balance")
