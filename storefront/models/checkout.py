"""Checkout models for the storefront"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class PaymentMethod(str, Enum):
    CASH_ON_DELIVERY = "COD"
    ONLINE = "Online"


class CheckoutState(str, Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class CustomerInfo(BaseModel):
    """Shipping details collected on the checkout form"""
    name: str = Field(min_length=1)
    city: str = Field(min_length=1)
    address: str = Field(min_length=1)
    contact: str = Field(min_length=1)

    class Config:
        str_strip_whitespace = True


class OrderLine(BaseModel):
    """Item in an order"""
    product_id: str = Field(alias="productId")
    name: str
    price: Optional[float] = None
    quantity: int

    class Config:
        populate_by_name = True


class OrderPayload(BaseModel):
    """
    Order sent to the Order Submission API.

    Dump with ``by_alias=True`` to get the wire field names.
    """
    client: CustomerInfo
    products: list[OrderLine]
    total_price: float = Field(alias="totalPrice")
    payment_method: PaymentMethod = Field(alias="paymentMethod")

    class Config:
        populate_by_name = True

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CheckoutRequest(BaseModel):
    """Request to checkout"""
    customer: CustomerInfo
    payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY


class CheckoutResponse(BaseModel):
    """Response from checkout"""
    success: bool
    state: CheckoutState
    order: Optional[OrderPayload] = None
    error_message: Optional[str] = None
    can_retry: bool = False
