import pytest

from storefront_qa.scenarios import ScenarioRegistry, registry


def test_decorator_registers_in_order():
    scenarios = ScenarioRegistry()

    @scenarios.scenario("Second thing")
    async def second(ctx):
        pass

    @scenarios.scenario("First thing", name="first", tags=["smoke"])
    async def first_impl(ctx):
        pass

    assert scenarios.names() == ["second", "first"]
    assert scenarios.get("first").tags == ["smoke"]
    assert scenarios.get("first").func is first_impl
    assert "second" in scenarios and len(scenarios) == 2


def test_duplicate_names_are_rejected():
    scenarios = ScenarioRegistry()

    @scenarios.scenario("One")
    async def dup(ctx):
        pass

    with pytest.raises(ValueError):
        scenarios.scenario("Two", name="dup")(dup)


def test_select_keeps_registration_order():
    assert registry.select(["clear_cart_idempotent", "storefront_available"]) == [
        registry.get("storefront_available"),
        registry.get("clear_cart_idempotent"),
    ]
    assert registry.select(None) == registry.all()


def test_unknown_scenario():
    with pytest.raises(KeyError, match="Unknown scenario"):
        registry.select(["no_such_scenario"])


def test_shop_catalog():
    assert registry.names() == [
        "storefront_available",
        "shop_lists_items",
        "cart_shows_selected_product",
        "checkout_shows_form",
        "checkout_shows_selected_product",
        "free_shipping_over_threshold",
        "paid_shipping_under_threshold",
        "paid_shipping_with_sale_item",
        "purchase_completes",
        "clear_cart_idempotent",
    ]
