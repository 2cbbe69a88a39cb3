"""Main entry point for the stripetools application.

Sets up the Typer CLI application, performs dependency injection (Composition Root),
defines one CLI command per Stripe operation, and delegates execution to the
CommandHandler. Typer parses and validates every argument before the core is called.
"""

import typer
import logging
import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional
from typing_extensions import Annotated

# --- Setup Logging Early ---
# Basic config until configure_logging_from_settings is called with the configured settings
logging.basicConfig(level=logging.WARNING, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

# --- Core Layer ---
from stripetools.core.command_handler import CommandHandler, ToolResult

# --- Infrastructure Layer ---
from stripetools.infrastructure.config.settings import load_configuration
from stripetools.infrastructure.cli.display import ConsoleDisplay
from stripetools.infrastructure.stripe.stripe_client import StripeClient
from stripetools.infrastructure.monitoring.logger_setup import configure_logging_from_settings

# --- Dependency Injection Container (Manual) ---

def create_dependencies() -> Dict[str, Any]:
    """Creates and wires up all dependencies for the application.

    This acts as the Composition Root. The Stripe client itself is created
    lazily by the CommandHandler on the first command.
    """
    load_configuration()
    configure_logging_from_settings()

    dependencies: Dict[str, Any] = {}
    dependencies['ui'] = ConsoleDisplay()
    dependencies['command_handler'] = CommandHandler(client_factory=StripeClient)
    logger.debug("All dependencies initialized successfully.")
    return dependencies

_dependencies: Optional[Dict[str, Any]] = None

def get_dependencies() -> Dict[str, Any]:
    global _dependencies
    if _dependencies is None:
        _dependencies = create_dependencies()
    return _dependencies

# --- Typer App Definition ---
app = typer.Typer(
    name="stripetools",
    help="Call the Stripe API from the command line: customers, products, prices, subscriptions, invoices and balance.",
    add_completion=False,
)

# --- Helper for Running Async Commands ---

async def _execute(
    handler: CommandHandler,
    command: Callable[[CommandHandler], Awaitable[ToolResult]],
) -> ToolResult:
    try:
        return await command(handler)
    finally:
        # Release the HTTP connection pool even on Ctrl-C
        await handler.aclose()

def run_command(command: Callable[[CommandHandler], Awaitable[ToolResult]]) -> None:
    """Runs one handler coroutine, prints its result, exits 1 on error results."""
    dependencies = get_dependencies()
    result = asyncio.run(_execute(dependencies['command_handler'], command))
    dependencies['ui'].display_result(result)
    if result.is_error:
        raise typer.Exit(code=1)

# --- Shared Options ---

LimitOption = Annotated[
    Optional[int],
    typer.Option("--limit", "-l", min=1, max=100, help="Maximum number of results to return (1-100).")
]
ActiveOption = Annotated[
    Optional[bool],
    typer.Option("--active/--inactive", help="Filter or set active status. Omit for no value.")
]
CustomerFilterOption = Annotated[Optional[str], typer.Option("--customer", help="Filter by customer ID.")]
EmailOption = Annotated[Optional[str], typer.Option(help="Customer email address.")]
NameOption = Annotated[Optional[str], typer.Option(help="Customer full name.")]
PhoneOption = Annotated[Optional[str], typer.Option(help="Customer phone number.")]
DescriptionOption = Annotated[Optional[str], typer.Option(help="Free-form description.")]

# --- Customer Commands ---

@app.command(name="create-customer")
def create_customer(
    email: EmailOption = None,
    name: NameOption = None,
    phone: PhoneOption = None,
    description: DescriptionOption = None,
):
    """Create a new customer."""
    run_command(lambda handler: handler.create_customer(email, name, phone, description))

@app.command(name="get-customer")
def get_customer(customer_id: Annotated[str, typer.Argument(help="Customer ID (cus_xxx).")]):
    """Get customer details by ID."""
    run_command(lambda handler: handler.get_customer(customer_id))

@app.command(name="update-customer")
def update_customer(
    customer_id: Annotated[str, typer.Argument(help="Customer ID to update.")],
    email: EmailOption = None,
    name: NameOption = None,
    phone: PhoneOption = None,
    description: DescriptionOption = None,
):
    """Update customer properties."""
    run_command(lambda handler: handler.update_customer(customer_id, email, name, phone, description))

@app.command(name="list-customers")
def list_customers(
    limit: LimitOption = None,
    starting_after: Annotated[Optional[str], typer.Option(help="Pagination cursor: customer ID to start after.")] = None,
    email: Annotated[Optional[str], typer.Option(help="Filter by exact email address.")] = None,
):
    """List customers with optional filters."""
    run_command(lambda handler: handler.list_customers(limit, starting_after, email))

@app.command(name="delete-customer")
def delete_customer(customer_id: Annotated[str, typer.Argument(help="Customer ID to delete.")]):
    """Delete a customer."""
    run_command(lambda handler: handler.delete_customer(customer_id))

# --- Product Commands ---

@app.command(name="create-product")
def create_product(
    name: Annotated[str, typer.Argument(help="Product name.")],
    description: DescriptionOption = None,
    active: ActiveOption = None,
):
    """Create a new product."""
    run_command(lambda handler: handler.create_product(name, description, active))

@app.command(name="get-product")
def get_product(product_id: Annotated[str, typer.Argument(help="Product ID (prod_xxx).")]):
    """Get product details by ID."""
    run_command(lambda handler: handler.get_product(product_id))

@app.command(name="list-products")
def list_products(limit: LimitOption = None, active: ActiveOption = None):
    """List products with optional filters."""
    run_command(lambda handler: handler.list_products(limit, active))

# --- Price Commands ---

@app.command(name="create-price")
def create_price(
    product_id: Annotated[str, typer.Argument(help="Product ID to create a price for.")],
    unit_amount: Annotated[int, typer.Option(help="Amount in the smallest currency unit (5000 = $50.00).")],
    currency: Annotated[str, typer.Option(help="Three-letter ISO currency code (usd, eur, jpy).")],
    recurring_interval: Annotated[
        Optional[str], typer.Option(help="Billing interval for subscriptions: day, week, month or year.")
    ] = None,
):
    """Create a new price for a product."""
    run_command(lambda handler: handler.create_price(product_id, unit_amount, currency, recurring_interval))

@app.command(name="get-price")
def get_price(price_id: Annotated[str, typer.Argument(help="Price ID (price_xxx).")]):
    """Get price details by ID."""
    run_command(lambda handler: handler.get_price(price_id))

@app.command(name="list-prices")
def list_prices(
    product: Annotated[Optional[str], typer.Option("--product", help="Filter prices by product ID.")] = None,
    active: ActiveOption = None,
    limit: LimitOption = None,
):
    """List prices with optional filters."""
    run_command(lambda handler: handler.list_prices(product, active, limit))

# --- Subscription Commands ---

@app.command(name="create-subscription")
def create_subscription(
    customer_id: Annotated[str, typer.Argument(help="Customer ID for the subscription.")],
    price_id: Annotated[str, typer.Argument(help="Price ID for the subscription item.")],
):
    """Create a new subscription."""
    run_command(lambda handler: handler.create_subscription(customer_id, price_id))

@app.command(name="get-subscription")
def get_subscription(subscription_id: Annotated[str, typer.Argument(help="Subscription ID (sub_xxx).")]):
    """Get subscription details by ID."""
    run_command(lambda handler: handler.get_subscription(subscription_id))

@app.command(name="cancel-subscription")
def cancel_subscription(subscription_id: Annotated[str, typer.Argument(help="Subscription ID to cancel.")]):
    """Cancel a subscription."""
    run_command(lambda handler: handler.cancel_subscription(subscription_id))

@app.command(name="list-subscriptions")
def list_subscriptions(
    customer: CustomerFilterOption = None,
    status: Annotated[
        Optional[str],
        typer.Option(help="Filter by status: active, canceled, incomplete, past_due, trialing, unpaid.")
    ] = None,
    limit: LimitOption = None,
):
    """List subscriptions with optional filters."""
    run_command(lambda handler: handler.list_subscriptions(customer, status, limit))

# --- Invoice Commands ---

@app.command(name="get-invoice")
def get_invoice(invoice_id: Annotated[str, typer.Argument(help="Invoice ID (in_xxx).")]):
    """Get invoice details by ID."""
    run_command(lambda handler: handler.get_invoice(invoice_id))

@app.command(name="list-invoices")
def list_invoices(
    customer: CustomerFilterOption = None,
    status: Annotated[
        Optional[str], typer.Option(help="Filter by status: draft, open, paid, uncollectible, void.")
    ] = None,
    limit: LimitOption = None,
):
    """List invoices with optional filters."""
    run_command(lambda handler: handler.list_invoices(customer, status, limit))

# --- Balance Command ---

@app.command(name="get-balance")
def get_balance():
    """Get current account balance."""
    run_command(lambda handler: handler.get_balance())

# --- Main Execution Guard ---

def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()

if __name__ == "__main__":
    cli_entry_point()
