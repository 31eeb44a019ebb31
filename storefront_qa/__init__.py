from .config import Settings, load_settings
from .exceptions import NotFoundError, ParseError, PreconditionError, StorefrontError, WaitTimeoutError
from .models import CartLine, OrderTotal, ProductCard, RenderMode, ShippingAvailability

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "load_settings",
    "StorefrontError",
    "NotFoundError",
    "ParseError",
    "PreconditionError",
    "WaitTimeoutError",
    "CartLine",
    "OrderTotal",
    "ProductCard",
    "RenderMode",
    "ShippingAvailability",
]
