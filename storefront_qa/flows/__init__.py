from .checkout_form import fill_billing_fields, select_pay_on_delivery
from .sequencer import FlowSequencer, resolve_product_id

__all__ = [
    "FlowSequencer",
    "resolve_product_id",
    "fill_billing_fields",
    "select_pay_on_delivery",
]
