"""Tests for the checkout flow"""

import asyncio
import json

import httpx
import pytest
from pydantic import ValidationError

from storefront.models.checkout import CheckoutState, CustomerInfo, PaymentMethod
from storefront.services.cart_store import CartStore
from storefront.services.api_client import StorefrontAPIClient
from storefront.services.checkout import (
    FALLBACK_ERROR_MESSAGE,
    CheckoutFlow,
    CheckoutInProgressError,
    EmptyCartError,
)

from .conftest import BASE_URL


@pytest.fixture
def customer() -> CustomerInfo:
    return CustomerInfo(name="Bilal Khan", city="Karachi", address="Block 5, Clifton", contact="03001234567")


@pytest.fixture
def cart(make_product) -> CartStore:
    cart = CartStore()
    cart.add_to_cart(make_product("A", 50), 2)
    cart.add_to_cart(make_product("B", None), 1)
    return cart


@pytest.fixture
def flow(cart, api_client) -> CheckoutFlow:
    return CheckoutFlow(cart, api_client)


def test_build_order(flow, customer):
    order = flow.build_order(customer, PaymentMethod.ONLINE)

    assert order.to_wire() == {
        "client": {
            "name": "Bilal Khan",
            "city": "Karachi",
            "address": "Block 5, Clifton",
            "contact": "03001234567",
        },
        "products": [
            {"productId": "A", "name": "Product A", "price": 50.0, "quantity": 2},
            {"productId": "B", "name": "Product B", "price": None, "quantity": 1},
        ],
        "totalPrice": 100.0,
        "paymentMethod": "Online",
    }


@pytest.mark.parametrize("field", ["name", "city", "address", "contact"])
def test_blank_customer_fields_rejected(field):
    data = {"name": "N", "city": "C", "address": "A", "contact": "1"}
    data[field] = "   "

    with pytest.raises(ValidationError):
        CustomerInfo(**data)


@pytest.mark.asyncio
async def test_success_clears_cart(flow, cart, customer, fake_api):
    response = await flow.submit(customer)

    assert response.success is True
    assert response.state == CheckoutState.CONFIRMED
    assert flow.state == CheckoutState.CONFIRMED
    assert cart.is_empty()
    assert len(fake_api.orders) == 1
    assert fake_api.orders[0]["paymentMethod"] == "COD"
    assert flow.last_order.total_price == 100


@pytest.mark.asyncio
async def test_rejection_keeps_cart_and_surfaces_server_message(flow, cart, customer, fake_api):
    fake_api.reject_orders = (422, {"message": "City is not served"})

    response = await flow.submit(customer)

    assert response.success is False
    assert response.error_message == "City is not served"
    assert response.can_retry is True
    assert flow.state == CheckoutState.FAILED
    assert cart.get_total_items() == 3


@pytest.mark.asyncio
async def test_rejection_without_message_uses_fallback(flow, customer, fake_api):
    fake_api.reject_orders = (500, {"error": "boom"})

    response = await flow.submit(customer)

    assert response.error_message == FALLBACK_ERROR_MESSAGE


@pytest.mark.asyncio
async def test_network_failure_keeps_cart(flow, cart, customer, fake_api):
    fake_api.fail_with = httpx.ConnectTimeout("timeout")

    response = await flow.submit(customer)

    assert response.success is False
    assert response.error_message == FALLBACK_ERROR_MESSAGE
    assert response.can_retry is True
    assert cart.get_total_products() == 2


@pytest.mark.asyncio
async def test_resubmission_after_failure(flow, cart, customer, fake_api):
    fake_api.fail_with = httpx.ReadTimeout("timeout")
    await flow.submit(customer)

    fake_api.fail_with = None
    response = await flow.submit(customer)

    assert response.success is True
    assert cart.is_empty()
    assert len(fake_api.orders) == 1


@pytest.mark.asyncio
async def test_retry_of_same_order_reuses_idempotency_key(flow, customer, fake_api):
    fake_api.reject_orders = (503, {"message": "Try again"})
    await flow.submit(customer)

    fake_api.reject_orders = None
    await flow.submit(customer)

    keys = [headers["Idempotency-Key"] for headers in fake_api.order_headers]
    assert len(keys) == 2
    assert keys[0] == keys[1]


@pytest.mark.asyncio
async def test_changed_order_gets_new_idempotency_key(flow, cart, customer, fake_api, make_product):
    fake_api.reject_orders = (503, {"message": "Try again"})
    await flow.submit(customer)

    cart.add_to_cart(make_product("C", 5))
    fake_api.reject_orders = None
    await flow.submit(customer)

    first, second = (headers["Idempotency-Key"] for headers in fake_api.order_headers)
    assert first != second


@pytest.mark.asyncio
async def test_next_order_after_success_gets_new_key(flow, cart, customer, fake_api, make_product):
    await flow.submit(customer)
    cart.add_to_cart(make_product("A", 50), 2)
    cart.add_to_cart(make_product("B", None), 1)
    await flow.submit(customer)

    first, second = (headers["Idempotency-Key"] for headers in fake_api.order_headers)
    assert first != second
    assert len(fake_api.orders) == 2


@pytest.mark.asyncio
async def test_empty_cart_refused(api_client, customer, fake_api):
    flow = CheckoutFlow(CartStore(), api_client)

    with pytest.raises(EmptyCartError):
        await flow.submit(customer)

    assert fake_api.order_headers == []


def test_reset(flow):
    flow.state = CheckoutState.CONFIRMED

    flow.reset()

    assert flow.state == CheckoutState.EDITING
    assert flow.error_message is None


def test_reset_ignored_while_submitting(flow):
    flow.state = CheckoutState.SUBMITTING

    flow.reset()

    assert flow.state == CheckoutState.SUBMITTING


class HeldOrderAPI:
    """Order endpoint that holds each POST until released"""

    def __init__(self):
        self.orders: list[dict] = []
        self.received = asyncio.Event()
        self.release = asyncio.Event()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        order = json.loads(request.content)
        self.orders.append(order)
        self.received.set()
        await self.release.wait()
        return httpx.Response(201, json={"_id": f"order-{len(self.orders)}", **order})


@pytest.fixture
def held_api() -> HeldOrderAPI:
    return HeldOrderAPI()


@pytest.fixture
def held_flow(cart, held_api) -> CheckoutFlow:
    client = StorefrontAPIClient(BASE_URL, timeout=5.0, transport=httpx.MockTransport(held_api))
    return CheckoutFlow(cart, client)


@pytest.mark.asyncio
async def test_cart_changes_while_order_in_flight_survive(held_flow, held_api, cart, customer, make_product):
    pending = asyncio.ensure_future(held_flow.submit(customer))
    await held_api.received.wait()

    assert held_flow.state == CheckoutState.SUBMITTING
    cart.add_to_cart(make_product("C", 5), 2)
    cart.update_quantity("A", 5)
    held_api.release.set()
    response = await pending

    assert response.success is True
    assert response.order.total_price == 100
    assert cart.get_item_quantity("A") == 3
    assert cart.get_item_quantity("B") == 0
    assert cart.get_item_quantity("C") == 2
    assert [line.product.id for line in cart.lines] == ["A", "C"]
    assert cart.get_total_items() == 5
    assert cart.get_total_price() == 160


@pytest.mark.asyncio
async def test_line_removed_while_order_in_flight_stays_gone(held_flow, held_api, cart, customer):
    pending = asyncio.ensure_future(held_flow.submit(customer))
    await held_api.received.wait()

    cart.remove_from_cart("A")
    held_api.release.set()
    await pending

    assert cart.is_empty()


@pytest.mark.asyncio
async def test_second_submit_while_in_flight_refused(held_flow, held_api, cart, customer):
    pending = asyncio.ensure_future(held_flow.submit(customer))
    await held_api.received.wait()

    with pytest.raises(CheckoutInProgressError):
        await held_flow.submit(customer)

    held_api.release.set()
    response = await pending

    assert response.success is True
    assert len(held_api.orders) == 1
    assert held_flow.state == CheckoutState.CONFIRMED
    assert cart.is_empty()


@pytest.mark.asyncio
async def test_unexpected_error_does_not_lock_flow(flow, cart, customer, fake_api):
    fake_api.fail_with = RuntimeError("handler crashed")

    with pytest.raises(RuntimeError):
        await flow.submit(customer)

    assert flow.state == CheckoutState.FAILED
    assert cart.get_total_items() == 3

    fake_api.fail_with = None
    response = await flow.submit(customer)

    assert response.success is True
    assert len(fake_api.orders) == 1
