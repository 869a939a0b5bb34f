"""
Checkout Flow

Turns the cart plus the customer's shipping details into an order,
submits it once, and removes the ordered items from the cart only when
the API accepts it.
"""

import logging
import uuid
from typing import Optional

from ..models.checkout import (
    CheckoutResponse,
    CheckoutState,
    CustomerInfo,
    OrderLine,
    OrderPayload,
    PaymentMethod,
)
from .api_client import OrderRejectedError, StorefrontAPIClient, StorefrontAPIError
from .cart_store import CartStore

logger = logging.getLogger(__name__)

FALLBACK_ERROR_MESSAGE = "Failed to submit order. Please try again."


class EmptyCartError(Exception):
    """Checkout was requested with nothing in the cart"""


class CheckoutInProgressError(Exception):
    """An order for this cart is already being submitted"""


class CheckoutFlow:
    """
    Checkout for one session's cart.

    Each distinct order payload gets its own idempotency key. Resubmitting
    the same payload after a failure reuses the key so a retry after a
    timeout cannot create a second order on a server that honours it.
    """

    def __init__(self, cart: CartStore, client: StorefrontAPIClient):
        self.cart = cart
        self.client = client
        self.state = CheckoutState.EDITING
        self.error_message: Optional[str] = None
        self.last_order: Optional[OrderPayload] = None
        self._pending_order: Optional[OrderPayload] = None
        self._idempotency_key: Optional[str] = None

    def build_order(
        self,
        customer: CustomerInfo,
        payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY,
    ) -> OrderPayload:
        """Assemble the order payload from the current cart"""
        return OrderPayload(
            client=customer,
            products=[
                OrderLine(
                    product_id=line.product.id,
                    name=line.product.name,
                    price=line.product.price,
                    quantity=line.quantity,
                )
                for line in self.cart.lines
            ],
            total_price=self.cart.get_total_price(),
            payment_method=payment_method,
        )

    def idempotency_key_for(self, order: OrderPayload) -> str:
        """Reuse the pending key for an identical resubmission, else mint one"""
        if self._idempotency_key is None or order != self._pending_order:
            self._idempotency_key = str(uuid.uuid4())
            self._pending_order = order
        return self._idempotency_key

    async def submit(
        self,
        customer: CustomerInfo,
        payment_method: PaymentMethod = PaymentMethod.CASH_ON_DELIVERY,
    ) -> CheckoutResponse:
        """
        Submit the order once.

        On success the ordered quantities are taken out of the cart and the
        flow is CONFIRMED; anything added while the request was in flight
        stays in the cart. On failure the cart is untouched and the flow is
        FAILED with a message; calling submit again resubmits. A second
        submit while one is in flight raises CheckoutInProgressError.
        """
        if self.state == CheckoutState.SUBMITTING:
            raise CheckoutInProgressError("Order is already being submitted")
        if self.cart.is_empty():
            raise EmptyCartError("Cart is empty")

        order = self.build_order(customer, payment_method)
        key = self.idempotency_key_for(order)

        self.state = CheckoutState.SUBMITTING
        self.error_message = None
        logger.info(
            f"Submitting order: {len(order.products)} products, "
            f"total={order.total_price}, key={key}"
        )

        try:
            await self.client.submit_order(order, idempotency_key=key)
        except OrderRejectedError as e:
            return self._fail(e.message or FALLBACK_ERROR_MESSAGE, can_retry=True)
        except StorefrontAPIError as e:
            return self._fail(FALLBACK_ERROR_MESSAGE, can_retry=e.can_retry)
        else:
            self._remove_ordered(order)
            self.state = CheckoutState.CONFIRMED
            self.last_order = order
            self._pending_order = None
            self._idempotency_key = None
            logger.info(f"Order placed (key={key})")
            return CheckoutResponse(success=True, state=self.state, order=order)
        finally:
            # An unexpected error must not leave the flow locked
            if self.state == CheckoutState.SUBMITTING:
                self.state = CheckoutState.FAILED

    def _remove_ordered(self, order: OrderPayload) -> None:
        """Take the submitted quantities out of the cart; lines at 0 go away"""
        for line in order.products:
            remaining = self.cart.get_item_quantity(line.product_id) - line.quantity
            self.cart.update_quantity(line.product_id, remaining)

    def reset(self) -> None:
        """Return to the form after an order ("continue shopping")"""
        if self.state == CheckoutState.SUBMITTING:
            return
        self.state = CheckoutState.EDITING
        self.error_message = None

    def _fail(self, message: str, can_retry: bool) -> CheckoutResponse:
        logger.error(f"Order submission failed: {message}")
        self.state = CheckoutState.FAILED
        self.error_message = message
        return CheckoutResponse(
            success=False,
            state=self.state,
            error_message=message,
            can_retry=can_retry,
        )
