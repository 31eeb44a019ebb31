"""Free shipping rules the storefront is configured with.

These mirror the server-side availability filter so scenarios can state the
expected outcome of a cart before reading it from the page.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable


@dataclass(frozen=True)
class CartItem:
    name: str
    price: Decimal
    quantity: int = 1
    on_sale: bool = False

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


def free_shipping_is_available(is_available: bool, cart_items: Iterable[CartItem]) -> bool:
    """Withdraw free shipping whenever any cart item is on sale.

    ``is_available`` is the verdict of the threshold check; a single sale item
    overrides it, otherwise it passes through unchanged.
    """
    if any(item.on_sale for item in cart_items):
        return False
    return is_available


def cart_subtotal(cart_items: Iterable[CartItem]) -> Decimal:
    return sum((item.line_total for item in cart_items), Decimal("0"))


def expected_free_shipping(cart_items: Iterable[CartItem], threshold: Decimal) -> bool:
    """Whether the storefront should offer free shipping for this cart."""
    items = list(cart_items)
    return free_shipping_is_available(cart_subtotal(items) >= threshold, items)


def units_to_reach(threshold: Decimal, unit_price: Decimal, subtotal: Decimal = Decimal("0")) -> int:
    """Smallest quantity (at least one) of ``unit_price`` that lifts
    ``subtotal`` to ``threshold``."""
    if unit_price <= 0:
        raise ValueError(f"unit price must be positive, got {unit_price}")
    return max(1, math.ceil((threshold - subtotal) / unit_price))
