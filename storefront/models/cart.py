"""Cart models for the storefront"""

from typing import Optional

from pydantic import BaseModel, Field

from .product import Product


class CartLine(BaseModel):
    """One product in the cart with its quantity"""
    product: Product
    quantity: int = Field(ge=1)

    @property
    def product_id(self) -> str:
        return self.product.id

    @property
    def line_total(self) -> float:
        return (self.product.price or 0) * self.quantity


class CartSummary(BaseModel):
    """Cart contents plus derived totals"""
    lines: list[CartLine] = []
    total_items: int = 0
    total_products: int = 0
    total_price: float = 0.0


class AddToCartRequest(BaseModel):
    """Request to add item to cart"""
    product_id: str
    quantity: int = Field(default=1, gt=0)


class UpdateCartItemRequest(BaseModel):
    """Request to set a cart line quantity; below 1 removes the line"""
    quantity: int


class CartResponse(BaseModel):
    """Cart API response"""
    session_id: str
    cart: CartSummary
    message: Optional[str] = None
