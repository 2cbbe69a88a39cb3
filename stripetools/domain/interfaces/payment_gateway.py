"""Interface for the remote payment API.

Defines the contract for every operation the command handler can execute.
Each operation is a single stateless round trip; implementations return the
decoded resource unchanged and raise on failure.
"""

import abc
from typing import Optional

from ..models.common import CustomerId, InvoiceId, PriceId, ProductId, SubscriptionId
from ..models.resources import (
    StripeBalance,
    StripeCustomer,
    StripeDeleteResult,
    StripeInvoice,
    StripeList,
    StripePrice,
    StripeProduct,
    StripeSubscription,
)


class PaymentGateway(abc.ABC):
    """Abstract Base Class for payment API clients."""

    # --- Customers ---

    @abc.abstractmethod
    async def create_customer(
        self,
        email: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        description: Optional[str] = None,
    ) -> StripeCustomer:
        pass

    @abc.abstractmethod
    async def get_customer(self, customer_id: CustomerId) -> StripeCustomer:
        pass

    @abc.abstractmethod
    async def update_customer(
        self,
        customer_id: CustomerId,
        email: Optional[str] = None,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        description: Optional[str] = None,
    ) -> StripeCustomer:
        pass

    @abc.abstractmethod
    async def list_customers(
        self,
        limit: Optional[int] = None,
        starting_after: Optional[CustomerId] = None,
        email: Optional[str] = None,
    ) -> StripeList:
        pass

    @abc.abstractmethod
    async def delete_customer(self, customer_id: CustomerId) -> StripeDeleteResult:
        pass

    # --- Products ---

    @abc.abstractmethod
    async def create_product(
        self,
        name: str,
        description: Optional[str] = None,
        active: Optional[bool] = None,
    ) -> StripeProduct:
        pass

    @abc.abstractmethod
    async def get_product(self, product_id: ProductId) -> StripeProduct:
        pass

    @abc.abstractmethod
    async def list_products(
        self,
        limit: Optional[int] = None,
        active: Optional[bool] = None,
    ) -> StripeList:
        pass

    # --- Prices ---

    @abc.abstractmethod
    async def create_price(
        self,
        product_id: ProductId,
        unit_amount: int,
        currency: str,
        recurring_interval: Optional[str] = None,
    ) -> StripePrice:
        pass

    @abc.abstractmethod
    async def get_price(self, price_id: PriceId) -> StripePrice:
        pass

    @abc.abstractmethod
    async def list_prices(
        self,
        product_id: Optional[ProductId] = None,
        active: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> StripeList:
        pass

    # --- Subscriptions ---

    @abc.abstractmethod
    async def create_subscription(self, customer_id: CustomerId, price_id: PriceId) -> StripeSubscription:
        pass

    @abc.abstractmethod
    async def get_subscription(self, subscription_id: SubscriptionId) -> StripeSubscription:
        pass

    @abc.abstractmethod
    async def cancel_subscription(self, subscription_id: SubscriptionId) -> StripeSubscription:
        pass

    @abc.abstractmethod
    async def list_subscriptions(
        self,
        customer_id: Optional[CustomerId] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> StripeList:
        pass

    # --- Invoices ---

    @abc.abstractmethod
    async def get_invoice(self, invoice_id: InvoiceId) -> StripeInvoice:
        pass

    @abc.abstractmethod
    async def list_invoices(
        self,
        customer_id: Optional[CustomerId] = None,
        status: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> StripeList:
        pass

    # --- Balance ---

    @abc.abstractmethod
    async def get_balance(self) -> StripeBalance:
        pass

    @abc.abstractmethod
    async def aclose(self) -> None:
        """Releases network resources held by the client."""
        pass
