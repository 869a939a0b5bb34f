"""Checkout API routes for the storefront"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..core.session import UserSession
from ..models.cart import CartSummary
from ..models.checkout import CheckoutRequest, CheckoutResponse, CheckoutState, OrderPayload
from ..services.api_client import StorefrontAPIClient
from ..services.checkout import CheckoutInProgressError, EmptyCartError
from .dependencies import get_api_client, get_session

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


class CheckoutStatus(BaseModel):
    """Where the session's checkout currently stands"""
    session_id: str
    state: CheckoutState
    cart: CartSummary
    last_order: Optional[OrderPayload] = None
    error_message: Optional[str] = None


def _status(session: UserSession, client: StorefrontAPIClient) -> CheckoutStatus:
    flow = session.get_checkout(client)
    return CheckoutStatus(
        session_id=session.session_id,
        state=flow.state,
        cart=session.cart.snapshot(),
        last_order=flow.last_order,
        error_message=flow.error_message,
    )


@router.get("", response_model=CheckoutStatus)
async def get_checkout(
    session: UserSession = Depends(get_session),
    client: StorefrontAPIClient = Depends(get_api_client),
):
    """Order summary and checkout state"""
    return _status(session, client)


@router.post("", response_model=CheckoutResponse)
async def checkout(
    request: CheckoutRequest,
    session: UserSession = Depends(get_session),
    client: StorefrontAPIClient = Depends(get_api_client),
):
    """
    Submit the session's cart as an order.

    A rejected or failed submission keeps the cart so the same request can
    be sent again; the response carries the reason.
    """
    flow = session.get_checkout(client)
    try:
        return await flow.submit(request.customer, request.payment_method)
    except EmptyCartError:
        raise HTTPException(status_code=400, detail="Cart is empty")
    except CheckoutInProgressError:
        raise HTTPException(status_code=409, detail="Order is already being submitted")


@router.post("/reset", response_model=CheckoutStatus)
async def reset_checkout(
    session: UserSession = Depends(get_session),
    client: StorefrontAPIClient = Depends(get_api_client),
):
    """Return to the checkout form"""
    session.get_checkout(client).reset()
    return _status(session, client)
