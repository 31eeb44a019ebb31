from decimal import Decimal

import pytest

from storefront_qa.models import ProductCard, ShippingAvailability


def make_card(**kwargs):
    defaults = dict(
        index=0,
        name="Leather Wallet",
        price=Decimal("25.00"),
        on_sale=False,
        root_selector="ul.products li.product >> nth=0",
        link_selector="ul.products li.product >> nth=0 >> a",
    )
    defaults.update(kwargs)
    return ProductCard(**defaults)


def test_card_is_directly_addable_only_with_add_control():
    assert not make_card().can_add_directly
    assert make_card(add_selector="ul.products li.product >> nth=0 >> a.add_to_cart_button").can_add_directly


def test_card_to_dict_serializes_price():
    data = make_card().to_dict()
    assert data["price"] == "25.00"
    assert data["name"] == "Leather Wallet"


@pytest.mark.parametrize(
    "methods, summary, free, paid, confirmed",
    [
        (("free_shipping:3",), "", True, False, True),
        (("flat_rate:1",), "", False, True, True),
        (("flat_rate:1", "free_shipping:3"), "", True, True, True),
        ((), "Free shipping", True, False, True),
        ((), "Shipping: Flat rate € 5,00", False, True, True),
        ((), "", False, False, False),
    ],
)
def test_shipping_availability(methods, summary, free, paid, confirmed):
    shipping = ShippingAvailability(method_values=methods, summary_text=summary)
    assert shipping.free_shipping is free
    assert shipping.paid_options is paid
    assert shipping.confirmed is confirmed
