"""Command Handler: executes one gateway operation per CLI command.

Sits at the boundary between the CLI and the payment gateway. The gateway is
built lazily on the first command, so a missing credential is reported as an
error result of that command. Every outcome, success or failure, is wrapped
into a uniform ToolResult; exceptions never escape to the caller.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from stripetools.domain.interfaces.payment_gateway import PaymentGateway
from stripetools.domain.models.common import CustomerId, InvoiceId, PriceId, ProductId, SubscriptionId
from stripetools.domain.models.resources import StripeList

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Outward envelope of one command: rendered text plus an error flag."""
    text: str
    is_error: bool = False


def to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2)


def error_result(error: BaseException) -> ToolResult:
    message = str(error) or "An unknown error occurred"
    return ToolResult(text=f"Error: {message}", is_error=True)


def list_envelope(result: StripeList, key: str) -> Dict[str, Any]:
    data = result.get("data", [])
    return {"total": len(data), "hasMore": result.get("has_more", False), key: data}


class CommandHandler:
    """Handles incoming commands and delegates to the payment gateway."""

    def __init__(self, client_factory: Callable[[], PaymentGateway]):
        """Initializes the CommandHandler.

        Args:
            client_factory: Zero-argument callable building the gateway on first use.
        """
        self._client_factory = client_factory
        self._client: Optional[PaymentGateway] = None

    def get_client(self) -> PaymentGateway:
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    async def aclose(self) -> None:
        """Closes the gateway if one was created."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _run(
        self,
        operation: str,
        call: Callable[[PaymentGateway], Awaitable[Any]],
        wrap: Callable[[Any], Any] = lambda result: result,
    ) -> ToolResult:
        logger.info(f"Handling '{operation}' command")
        try:
            result = await call(self.get_client())
        except Exception as e:
            logger.error(f"Command '{operation}' failed: {e}")
            return error_result(e)
        return ToolResult(text=to_json(wrap(result)))

    # --- Customers ---

    async def create_customer(
        self,
        email: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ToolResult:
        return await self._run(
            "create_customer",
            lambda client: client.create_customer(email, name, phone, description),
            lambda customer: {"success": True, "customer": customer},
        )

    async def get_customer(self, customer_id: str) -> ToolResult:
        return await self._run("get_customer", lambda client: client.get_customer(CustomerId(customer_id)))

    async def update_customer(
        self,
        customer_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ToolResult:
        return await self._run(
            "update_customer",
            lambda client: client.update_customer(CustomerId(customer_id), email, name, phone, description),
            lambda customer: {"success": True, "customer": customer},
        )

    async def list_customers(
        self,
        limit: Optional[int] = None,
        starting_after: Optional[str] = None,
        email: Optional[str] = None,
    ) -> ToolResult:
        return await self._run(
            "list_customers",
            lambda client: client.list_customers(
                limit, CustomerId(starting_after) if starting_after else None, email
            ),
            lambda page: list_envelope(page, "customers"),
        )

    async def delete_customer(self, customer_id: str) -> ToolResult:
        return await self._run(
            "delete_customer",
            lambda client: client.delete_customer(CustomerId(customer_id)),
            lambda deleted: {"success": True, "deleted": deleted.get("deleted"), "id": deleted.get("id")},
        )

    # --- Products ---

    async def create_product(
        self,
        name: str,
        description: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> ToolResult:
        return await self._run(
            "create_product",
            lambda client: client.create_product(name, description, active),
            lambda product: {"success": True, "product": product},
        )

    async def get_product(self, product_id: str) -> ToolResult:
        return await self._run("get_product", lambda client: client.get_product(ProductId(product_id)))

    async def list_products(self, limit: Optional[int] = None, active: Optional[bool] = None) -> ToolResult:
        return await self._run(
            "list_products",
            lambda client: client.list_products(limit, active),
            lambda page: list_envelope(page, "products"),
        )

    # --- Prices ---

    async def create_price(
        self,
        product_id: str,
        unit_amount: int,
        currency: str,
        recurring_interval: Optional[str] = None,
    ) -> ToolResult:
        return await self._run(
            "create_price",
            lambda client: client.create_price(ProductId(product_id), unit_amount, currency, recurring_interval),
            lambda price: {"success": True, "price": price},
        )

    async def get_price(self, price_id: str) -> ToolResult:
        return await self._run("get_price", lambda client: client.get_price(PriceId(price_id)))

    async def list_prices(
        self,
        product_id: Optional[str] = None,
        active: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> ToolResult:
        return await self._run(
            "list_prices",
            lambda client: client.list_prices(ProductId(product_id) if product_id else None, active, limit),
            lambda page: list_envelope(page, "prices"),
        )

    # --- Subscriptions ---

    async def create_subscription(self, customer_id: str, price_id: str) -> ToolResult:
        return await self._run(
            "create_subscription",
            lambda client: client.create_subscription(CustomerId(customer_id), PriceId(price_id)),
            lambda subscription: {"success": True, "subscription": subscription},
        )

    async def get_subscription(self, subscription_id: str) -> ToolResult:
        return await self._run(
            "get_subscription",
            lambda client: client.get_subscription(SubscriptionId(subscription_id)),
        )

    async def cancel_subscription(self, subscription_id: str) -> ToolResult:
        return await self._run(
            "cancel_subscription",
            lambda client: client.cancel_subscription(SubscriptionId(subscription_id)),
            lambda subscription: {
                "success": True,
                "status": subscription.get("status"),
                "subscription": subscription,
            },
        )

    async def list_subscriptions(
        self,
        customer_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ToolResult:
        return await self._run(
            "list_subscriptions",
            lambda client: client.list_subscriptions(
                CustomerId(customer_id) if customer_id else None, status, limit
            ),
            lambda page: list_envelope(page, "subscriptions"),
        )

    # --- Invoices ---

    async def get_invoice(self, invoice_id: str) -> ToolResult:
        return await self._run("get_invoice", lambda client: client.get_invoice(InvoiceId(invoice_id)))

    async def list_invoices(
        self,
        customer_id: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> ToolResult:
        return await self._run(
            "list_invoices",
            lambda client: client.list_invoices(
                CustomerId(customer_id) if customer_id else None, status, limit
            ),
            lambda page: list_envelope(page, "invoices"),
        )

    # --- Balance ---

    async def get_balance(self) -> ToolResult:
        return await self._run("get_balance", lambda client: client.get_balance())
