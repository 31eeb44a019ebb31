"""Acceptance scenarios for the shop.

Every scenario starts from an empty cart; the executor clears it first.
"""

import logging
import re

from playwright.async_api import expect

from storefront_qa.reader.selectors import ORDER_SUMMARIES
from storefront_qa.rules.shipping import CartItem, cart_subtotal, expected_free_shipping, units_to_reach
from storefront_qa.scenarios.registry import ScenarioContext, ScenarioRegistry

registry = ScenarioRegistry()


def _as_cart_item(card, quantity: int = 1) -> CartItem:
    return CartItem(name=card.name, price=card.price, quantity=quantity, on_sale=card.on_sale)


@registry.scenario("Ecommerce is available", tags=["smoke"])
async def storefront_available(ctx: ScenarioContext):
    await ctx.page.goto(ctx.settings.url(ctx.settings.paths.home), wait_until="domcontentloaded")
    await expect(ctx.page.locator("body")).to_have_class(re.compile("woocommerce"))


@registry.scenario("Shop page is listing items properly", tags=["smoke"])
async def shop_lists_items(ctx: ScenarioContext):
    cards = await ctx.flows.list_products()
    assert len(cards) > 0, "listing is empty"
    for card in cards:
        assert card.price > 0, f"{card.name} has a non-positive price {card.price}"


@registry.scenario("Cart page is showing correctly selected products", tags=["cart"])
async def cart_shows_selected_product(ctx: ScenarioContext):
    cards = await ctx.flows.list_products()
    card = next((c for c in cards if re.search("wallet", c.name, re.IGNORECASE)), cards[0])
    await ctx.flows.add_to_cart(card)
    await ctx.flows.goto_cart()
    await ctx.flows.assert_cart_has([card.name])


@registry.scenario("Checkout is showing the form correctly", tags=["checkout"])
async def checkout_shows_form(ctx: ScenarioContext):
    await ctx.flows.add_first_non_sale()
    await ctx.flows.reach_checkout()
    await ctx.flows.expect_checkout_form()


@registry.scenario("Checkout is showing correctly selected products", tags=["checkout"])
async def checkout_shows_selected_product(ctx: ScenarioContext):
    added = await ctx.flows.add_first_non_sale()
    await ctx.flows.reach_checkout()
    await expect(ctx.page.locator(ORDER_SUMMARIES).first).to_contain_text(added.name)


@registry.scenario("Shipping is free if checkout total reaches the threshold", tags=["shipping"])
async def free_shipping_over_threshold(ctx: ScenarioContext):
    threshold = ctx.settings.free_shipping_threshold
    cards = await ctx.flows.list_products()
    card = next((c for c in cards if not c.on_sale), None)
    assert card is not None, "no non-sale product listed"

    quantity = units_to_reach(threshold, card.price)
    items = [_as_cart_item(card, quantity)]
    assert expected_free_shipping(items, threshold), "cart would not qualify for free shipping"

    await ctx.flows.add_from_detail(card, quantity=quantity)
    await ctx.flows.reach_checkout()
    await ctx.flows.fill_checkout_minimal()

    shipping = await ctx.reader.wait_for_shipping(lambda s: s.free_shipping)
    assert shipping.free_shipping, f"free shipping not offered: {shipping.summary_text[:200]!r}"


@registry.scenario("Shipping is not free if checkout total is below the threshold", tags=["shipping"])
async def paid_shipping_under_threshold(ctx: ScenarioContext):
    await ctx.flows.add_first_non_sale()
    await ctx.flows.reach_checkout()
    total = await ctx.reader.read_order_total()
    assert total.amount < ctx.settings.free_shipping_threshold, f"total {total.amount} is not below the threshold"
    assert await ctx.reader.has_only_paid_shipping(), "free shipping offered below the threshold"


@registry.scenario("Shipping is not free with a discounted product in the cart", tags=["shipping"])
async def paid_shipping_with_sale_item(ctx: ScenarioContext):
    threshold = ctx.settings.free_shipping_threshold
    sale = await ctx.flows.add_first_sale()

    cards = await ctx.flows.list_products()
    card = next((c for c in cards if not c.on_sale), None)
    assert card is not None, "no non-sale product listed"

    # enough regular units that only the sale item can withdraw free shipping
    quantity = units_to_reach(threshold, card.price, subtotal=sale.price)
    items = [_as_cart_item(sale), _as_cart_item(card, quantity)]
    assert cart_subtotal(items) >= threshold, f"cart subtotal {cart_subtotal(items)} is below {threshold}"
    assert not expected_free_shipping(items, threshold)

    await ctx.flows.add_from_detail(card, quantity=quantity)
    await ctx.flows.reach_checkout()
    await ctx.flows.fill_checkout_minimal()
    await ctx.reader.wait_for_shipping()
    assert await ctx.reader.has_only_paid_shipping(), "free shipping offered despite a sale item"


@registry.scenario("The purchase completes successfully", tags=["checkout"])
async def purchase_completes(ctx: ScenarioContext):
    await ctx.flows.add_first_non_sale()
    await ctx.flows.reach_checkout()
    await ctx.flows.fill_checkout_minimal()
    assert await ctx.flows.place_order(), "no place order button"
    notice = await ctx.flows.wait_for_order_confirmation()
    logging.debug(f"Confirmation notice: {notice}")


@registry.scenario("Clearing the cart is idempotent", tags=["cart"])
async def clear_cart_idempotent(ctx: ScenarioContext):
    await ctx.flows.add_any_purchasable()
    assert await ctx.reader.has_cart_rows(), "cart has no rows after adding a product"
    await ctx.flows.clear_cart()
    assert not await ctx.reader.has_cart_rows(), "cart still has rows after clearing"
    assert await ctx.flows.clear_cart() == 0, "second clear removed rows from an empty cart"
