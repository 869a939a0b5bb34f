"""Shared fixtures: a fake remote API behind httpx.MockTransport"""

import json
from typing import Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from storefront.core.session import session_manager
from storefront.main import app
from storefront.models.product import Product
from storefront.routes.dependencies import get_api_client
from storefront.services.api_client import StorefrontAPIClient

BASE_URL = "http://directory.test/api"

RAW_PRODUCTS = [
    {
        "_id": "p1",
        "name": "Basmati Rice 5kg",
        "description": "Long grain aged rice",
        "price": 1850,
        "available": True,
        "onOffer": "true",
        "category": {"name": "Grocery"},
    },
    {
        "_id": "p2",
        "name": "Olive Oil",
        "description": "Extra virgin, cold pressed",
        "price": 2400,
        "available": "true",
        "onOffer": False,
        "category": "Grocery",
    },
    {
        "_id": "p3",
        "name": "Steel Water Bottle",
        "price": 900,
        "available": 0,
        "onOffer": 1,
        "category": "Kitchen",
    },
    {
        "_id": "p4",
        "name": "Gift Hamper",
        "description": "Contact us for pricing",
        "available": 1,
    },
]


class FakeAPI:
    """In-memory stand-in for the remote product and order API"""

    def __init__(self, products: Optional[list[dict]] = None):
        self.products = {p["_id"]: p for p in (products if products is not None else RAW_PRODUCTS)}
        self.orders: list[dict] = []
        self.order_headers: list[httpx.Headers] = []
        self.fail_with: Optional[Exception] = None
        self.reject_orders: Optional[tuple[int, dict]] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.fail_with is not None:
            raise self.fail_with

        path = request.url.path.removeprefix("/api")

        if request.method == "GET" and path == "/products":
            return httpx.Response(200, json=list(self.products.values()))

        if request.method == "GET" and path.startswith("/products/"):
            product = self.products.get(path.split("/")[-1])
            if product is None:
                return httpx.Response(404, json={"message": "Product not found"})
            return httpx.Response(200, json=product)

        if request.method == "POST" and path == "/orders":
            self.order_headers.append(request.headers)
            if self.reject_orders is not None:
                status, body = self.reject_orders
                return httpx.Response(status, json=body)
            order = json.loads(request.content)
            self.orders.append(order)
            return httpx.Response(201, json={"_id": f"order-{len(self.orders)}", **order})

        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture
def fake_api() -> FakeAPI:
    return FakeAPI()


@pytest.fixture
def api_client(fake_api: FakeAPI) -> StorefrontAPIClient:
    return StorefrontAPIClient(BASE_URL, timeout=5.0, transport=httpx.MockTransport(fake_api))


@pytest.fixture
def make_product():
    def _make(product_id: str = "A", price: Optional[float] = None, **fields) -> Product:
        return Product(id=product_id, name=fields.pop("name", f"Product {product_id}"), price=price, **fields)

    return _make


@pytest.fixture
def client(api_client: StorefrontAPIClient):
    app.dependency_overrides[get_api_client] = lambda: api_client
    session_manager.sessions.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()
    session_manager.sessions.clear()
