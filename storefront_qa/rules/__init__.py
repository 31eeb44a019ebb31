from .shipping import CartItem, cart_subtotal, expected_free_shipping, free_shipping_is_available, units_to_reach

__all__ = ["CartItem", "cart_subtotal", "expected_free_shipping", "free_shipping_is_available", "units_to_reach"]
