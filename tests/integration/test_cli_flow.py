import json
from io import StringIO

import httpx
import pytest
from rich.console import Console

from stripetools import main
from stripetools.core.command_handler import CommandHandler
from stripetools.infrastructure.cli.display import ConsoleDisplay
from stripetools.main import app


class Wiring:
    """Dependencies injected into the CLI, with captured output buffers."""

    def __init__(self, client_factory):
        self.out = StringIO()
        self.err = StringIO()
        self.dependencies = {
            "ui": ConsoleDisplay(
                console=Console(file=self.out, color_system=None, width=200),
                error_console=Console(file=self.err, color_system=None, width=200),
            ),
            "command_handler": CommandHandler(client_factory=client_factory),
        }


@pytest.fixture
def wire(monkeypatch):
    def _wire(client_factory) -> Wiring:
        wiring = Wiring(client_factory)
        monkeypatch.setattr(main, "_dependencies", wiring.dependencies)
        return wiring
    return _wire


def test_get_customer_prints_resource(runner, wire, make_client, echo_handler):
    wiring = wire(lambda: make_client(echo_handler))

    result = runner.invoke(app, ["get-customer", "cus_42"])

    assert result.exit_code == 0
    assert json.loads(wiring.out.getvalue())["id"] == "cus_42"
    assert echo_handler.requests[0].url.path == "/v1/customers/cus_42"


def test_create_price_sends_form_body(runner, wire, make_client, recording_handler):
    handler = recording_handler([httpx.Response(200, json={"id": "price_1", "object": "price"})])
    wiring = wire(lambda: make_client(handler))

    result = runner.invoke(app, [
        "create-price", "prod_1", "--unit-amount", "5000", "--currency", "usd", "--recurring-interval", "month",
    ])

    assert result.exit_code == 0
    assert handler.requests[0].content == b"product=prod_1&unit_amount=5000&currency=usd&recurring%5Binterval%5D=month"
    assert json.loads(wiring.out.getvalue()) == {"success": True, "price": {"id": "price_1", "object": "price"}}


def test_list_customers_prints_summary(runner, wire, make_client, recording_handler):
    page = {"object": "list", "data": [{"id": "cus_1"}], "has_more": False, "url": "/v1/customers"}
    handler = recording_handler([httpx.Response(200, json=page)])
    wiring = wire(lambda: make_client(handler))

    result = runner.invoke(app, ["list-customers", "--limit", "1", "--email", "a@b.com"])

    assert result.exit_code == 0
    assert dict(handler.requests[0].url.params) == {"limit": "1", "email": "a@b.com"}
    assert json.loads(wiring.out.getvalue()) == {"total": 1, "hasMore": False, "customers": [{"id": "cus_1"}]}


def test_create_product_inactive_flag(runner, wire, make_client, recording_handler):
    handler = recording_handler()
    wire(lambda: make_client(handler))

    result = runner.invoke(app, ["create-product", "Widget", "--inactive"])

    assert result.exit_code == 0
    assert handler.requests[0].content == b"name=Widget&active=false"


def test_remote_error_exits_non_zero(runner, wire, make_client, recording_handler):
    handler = recording_handler([httpx.Response(404, text='{"error":{"message":"No such invoice"}}')])
    wiring = wire(lambda: make_client(handler))

    result = runner.invoke(app, ["get-invoice", "in_missing"])

    assert result.exit_code == 1
    assert "Stripe API error (404 Not Found)" in wiring.err.getvalue()
    assert wiring.out.getvalue() == ""


def test_missing_secret_key_is_reported(runner, wire):
    def factory():
        raise ValueError("STRIPE_SECRET_KEY environment variable is not set.")

    wiring = wire(factory)

    result = runner.invoke(app, ["get-balance"])

    assert result.exit_code == 1
    assert "STRIPE_SECRET_KEY" in wiring.err.getvalue()


def test_limit_out_of_range_is_rejected_before_any_request(runner, wire, make_client, recording_handler):
    handler = recording_handler()
    wire(lambda: make_client(handler))

    result = runner.invoke(app, ["list-products", "--limit", "0"])

    assert result.exit_code == 2
    assert handler.requests == []


def test_missing_required_option_is_rejected(runner, wire, make_client, recording_handler):
    handler = recording_handler()
    wire(lambda: make_client(handler))

    result = runner.invoke(app, ["create-price", "prod_1", "--currency", "usd"])

    assert result.exit_code == 2
    assert handler.requests == []


def test_create_dependencies_wires_logging_and_handler(mocker):
    configure_logging = mocker.patch("stripetools.main.configure_logging_from_settings")
    mocker.patch("stripetools.main.load_configuration")

    dependencies = main.create_dependencies()

    configure_logging.assert_called_once_with()
    assert isinstance(dependencies["ui"], ConsoleDisplay)
    assert isinstance(dependencies["command_handler"], CommandHandler)
