"""
Cart Store

In-memory shopping cart for a single storefront session.
All cart mutations go through this class; totals are always derived
from the lines, never cached.
"""

import logging
from typing import Callable

from ..models.cart import CartLine, CartSummary
from ..models.product import Product

logger = logging.getLogger(__name__)

CartObserver = Callable[["CartStore"], None]


class CartStore:
    """
    Product id -> quantity bookkeeping for one cart.

    Lines keep insertion order. No method raises: removing an absent
    product or driving a quantity below 1 degrades to a no-op or a removal.
    Observers registered through ``subscribe`` are called after every
    change to the lines.
    """

    def __init__(self):
        self._lines: dict[str, CartLine] = {}
        self._observers: list[CartObserver] = []

    # ==================== Mutations ====================

    def add_to_cart(self, product: Product, quantity: int = 1) -> None:
        """Add a product, merging into the existing line if present"""
        existing = self._lines.get(product.id)

        if existing:
            combined = existing.quantity + quantity
            if combined < 1:
                self.remove_from_cart(product.id)
                return
            # Re-adding keeps the original position and snapshot
            self._lines[product.id] = CartLine(product=existing.product, quantity=combined)
        else:
            if quantity < 1:
                return
            self._lines[product.id] = CartLine(product=product, quantity=quantity)

        logger.debug(f"Added {quantity}x {product.id} to cart")
        self._notify()

    def remove_from_cart(self, product_id: str) -> bool:
        """Remove the line for a product. Returns False if there was none."""
        if product_id not in self._lines:
            return False

        del self._lines[product_id]
        logger.debug(f"Removed {product_id} from cart")
        self._notify()
        return True

    def update_quantity(self, product_id: str, new_quantity: int) -> bool:
        """
        Set a line's quantity exactly.

        A quantity below 1 removes the line. Returns False when the product
        has no line; the cart is left untouched in that case.
        """
        if new_quantity < 1:
            return self.remove_from_cart(product_id)

        line = self._lines.get(product_id)
        if not line:
            return False

        self._lines[product_id] = CartLine(product=line.product, quantity=new_quantity)
        self._notify()
        return True

    def clear_cart(self) -> None:
        """Remove every line"""
        had_lines = bool(self._lines)
        self._lines.clear()
        if had_lines:
            self._notify()

    # ==================== Derived values ====================

    @property
    def lines(self) -> tuple[CartLine, ...]:
        """Snapshot of the cart lines in insertion order"""
        return tuple(line.model_copy() for line in self._lines.values())

    def get_total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def get_total_products(self) -> int:
        return len(self._lines)

    def get_item_quantity(self, product_id: str) -> int:
        line = self._lines.get(product_id)
        return line.quantity if line else 0

    def get_total_price(self) -> float:
        """Sum of price x quantity; lines without a price count as 0"""
        return sum((line.line_total for line in self._lines.values()), 0.0)

    def is_empty(self) -> bool:
        return not self._lines

    def snapshot(self) -> CartSummary:
        return CartSummary(
            lines=list(self.lines),
            total_items=self.get_total_items(),
            total_products=self.get_total_products(),
            total_price=self.get_total_price(),
        )

    # ==================== Observers ====================

    def subscribe(self, observer: CartObserver) -> Callable[[], None]:
        """Register a change observer. Returns a callable that unregisters it."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer(self)
