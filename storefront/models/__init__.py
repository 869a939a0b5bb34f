# Storefront Models

from .product import Product, UNCATEGORIZED, normalize_flag
from .cart import CartLine, CartSummary, AddToCartRequest, UpdateCartItemRequest, CartResponse
from .checkout import (
    CheckoutRequest,
    CheckoutResponse,
    CheckoutState,
    CustomerInfo,
    OrderLine,
    OrderPayload,
    PaymentMethod,
)

__all__ = [
    "Product",
    "UNCATEGORIZED",
    "normalize_flag",
    "CartLine",
    "CartSummary",
    "AddToCartRequest",
    "UpdateCartItemRequest",
    "CartResponse",
    "CheckoutRequest",
    "CheckoutResponse",
    "CheckoutState",
    "CustomerInfo",
    "OrderLine",
    "OrderPayload",
    "PaymentMethod",
]
