"""Cart API routes for the storefront"""

from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException

from ..core.session import UserSession, session_manager
from ..models.cart import AddToCartRequest, CartResponse, UpdateCartItemRequest
from ..services.api_client import ProductNotFoundError, StorefrontAPIClient, StorefrontAPIError
from .dependencies import api_error, get_api_client, get_session

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def _response(session: UserSession, message: Optional[str] = None) -> CartResponse:
    return CartResponse(
        session_id=session.session_id,
        cart=session.cart.snapshot(),
        message=message,
    )


@router.get("", response_model=CartResponse)
async def get_cart(session: UserSession = Depends(get_session)):
    """Get the session's cart"""
    return _response(session)


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    request: AddToCartRequest,
    session: UserSession = Depends(get_session),
    client: StorefrontAPIClient = Depends(get_api_client),
):
    """Add an item to the cart"""
    try:
        product = await client.get_product(request.product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except StorefrontAPIError as e:
        raise api_error(e)

    # The store does not check stock; unavailable products are refused here
    if not product.available:
        raise HTTPException(status_code=400, detail=f"{product.name} is out of stock")

    session.cart.add_to_cart(product, request.quantity)
    return _response(session, f"Added {request.quantity}x {product.name} to cart")


@router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str,
    request: UpdateCartItemRequest,
    session: UserSession = Depends(get_session),
):
    """Set an item's quantity; anything below 1 removes it"""
    if request.quantity < 1:
        removed = session.cart.update_quantity(product_id, request.quantity)
        return _response(session, "Item removed" if removed else "Item not in cart")

    if not session.cart.update_quantity(product_id, request.quantity):
        raise HTTPException(status_code=404, detail="Item not in cart")
    return _response(session, "Cart updated")


@router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: str,
    session: UserSession = Depends(get_session),
):
    """Remove an item from the cart"""
    removed = session.cart.remove_from_cart(product_id)
    return _response(session, "Item removed" if removed else "Item not in cart")


@router.delete("", response_model=CartResponse)
async def clear_cart(session: UserSession = Depends(get_session)):
    """Clear all items from cart"""
    session.cart.clear_cart()
    return _response(session, "Cart cleared")


@router.delete("/session")
async def end_session(x_session_id: Optional[str] = Header(None)):
    """End the session and discard its cart"""
    if not x_session_id or not session_manager.delete_session(x_session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"message": "Session ended", "session_id": x_session_id}
