from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RenderMode(str, Enum):
    """Structural variant the storefront used to render cart and checkout."""

    CLASSIC = "classic"
    BLOCKS = "blocks"


@dataclass(frozen=True)
class ProductCard:
    """One catalog entry as rendered in a listing."""

    index: int
    name: str
    price: Decimal
    on_sale: bool
    root_selector: str
    link_selector: str
    add_selector: Optional[str] = None
    product_id: Optional[str] = None
    add_href: Optional[str] = None
    detail_url: Optional[str] = None

    @property
    def can_add_directly(self) -> bool:
        return self.add_selector is not None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["price"] = str(self.price)
        return data


@dataclass(frozen=True)
class CartLine:
    name: str


@dataclass(frozen=True)
class OrderTotal:
    amount: Decimal
    raw_text: str
    tier: str


@dataclass(frozen=True)
class ShippingAvailability:
    """Shipping options as rendered at cart or checkout time."""

    method_values: Tuple[str, ...] = field(default_factory=tuple)
    summary_text: str = ""

    @property
    def free_shipping(self) -> bool:
        if any("free_shipping" in value for value in self.method_values):
            return True
        return "free" in self.summary_text.lower()

    @property
    def paid_options(self) -> bool:
        # at least one offered method is not the free one
        if self.method_values:
            return any("free_shipping" not in value for value in self.method_values)
        text = self.summary_text.lower()
        return "shipping" in text and "free" not in text

    @property
    def confirmed(self) -> bool:
        """Whether any shipping UI was rendered at all."""
        return bool(self.method_values) or bool(self.summary_text.strip())
