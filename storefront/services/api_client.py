"""
Storefront API Client

HTTP client for the remote product directory and order submission APIs.
Normalises product payloads at the boundary and maps transport and HTTP
failures onto a small exception hierarchy.
"""

import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..models.checkout import OrderPayload
from ..models.product import Product

logger = logging.getLogger(__name__)


class StorefrontAPIError(Exception):
    """Base exception for storefront API errors"""
    can_retry = False


class APITransportError(StorefrontAPIError):
    """Timeout, refused connection or other network failure"""
    can_retry = True


class APIResponseError(StorefrontAPIError):
    """The API answered with an error status"""

    def __init__(self, status_code: int, message: Optional[str] = None):
        self.status_code = status_code
        self.message = message
        super().__init__(message or f"API request failed with status {status_code}")


class ProductNotFoundError(APIResponseError):
    """The requested product does not exist"""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(404, f"Product not found: {product_id}")


class OrderRejectedError(APIResponseError):
    """The order API refused the order"""
    can_retry = True


class StorefrontAPIClient:
    """
    Client for the storefront's remote API.

    Usage:
        client = StorefrontAPIClient(settings.api_base_url)
        products = await client.list_products()
        product = await client.get_product("abc123")
        await client.submit_order(order, idempotency_key=key)
        await client.close()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize API client.

        Args:
            base_url: Base URL of the remote API, e.g. https://host/api
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Any:
        """Make an HTTP request and decode the JSON response"""
        logger.debug(f"Request: {method} {self.base_url}{path}")

        try:
            response = await self._http_client.request(
                method=method,
                url=path,
                json=body,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            logger.error(f"Request timeout - server might be slow: {method} {path}")
            raise APITransportError("Request timed out. Please try again.") from e
        except httpx.TransportError as e:
            logger.error(f"Network error: check server availability ({e})")
            raise APITransportError(
                "Could not reach the server. Please check your connection and try again."
            ) from e

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise APIResponseError(response.status_code, self._error_message(response))

        logger.info(f"Response received: {response.status_code} for {method} {path}")

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise APIResponseError(response.status_code, "Invalid JSON in response") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> Optional[str]:
        """Pull the human readable ``message`` out of an error body"""
        try:
            data = response.json()
        except ValueError:
            return None
        if isinstance(data, dict) and isinstance(data.get("message"), str):
            return data["message"]
        return None

    # ==================== Product APIs ====================

    async def list_products(self) -> list[Product]:
        """Fetch the whole product directory"""
        data = await self._request("GET", "/products")

        if isinstance(data, dict):
            data = data.get("products", data.get("data", []))
        if not isinstance(data, list):
            raise APIResponseError(200, "Unexpected product list format")

        products = []
        for item in data:
            try:
                products.append(Product.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed product {item!r}: {e}")
        return products

    async def get_product(self, product_id: str) -> Product:
        """Get product details"""
        try:
            data = await self._request("GET", f"/products/{product_id}")
        except APIResponseError as e:
            if e.status_code == 404:
                raise ProductNotFoundError(product_id) from e
            raise

        if not data:
            raise ProductNotFoundError(product_id)
        if isinstance(data, dict) and isinstance(data.get("product"), dict):
            data = data["product"]

        try:
            return Product.model_validate(data)
        except ValidationError as e:
            raise APIResponseError(200, f"Malformed product {product_id}") from e

    # ==================== Order APIs ====================

    async def submit_order(
        self,
        order: OrderPayload,
        idempotency_key: Optional[str] = None,
    ) -> Any:
        """
        Submit an order.

        The idempotency key is sent as the ``Idempotency-Key`` header so a
        server that honours it can drop duplicate submissions.
        """
        headers = {"Idempotency-Key": idempotency_key} if idempotency_key else None

        try:
            return await self._request("POST", "/orders", body=order.to_wire(), headers=headers)
        except APIResponseError as e:
            raise OrderRejectedError(e.status_code, e.message) from e
