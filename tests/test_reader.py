import logging
from decimal import Decimal

import pytest

from fakes import FakePage, listing_item
from storefront_qa.exceptions import NotFoundError, ParseError, PreconditionError, WaitTimeoutError
from storefront_qa.models import RenderMode
from storefront_qa.reader import PageStateReader
from storefront_qa.reader import scripts
from storefront_qa.reader.selectors import BLOCKS, CLASSIC, ORDER_SUMMARIES, PAGE_CONTAINERS
from storefront_qa.reader.sources import BlocksStateSource, ClassicStateSource, detect_source


@pytest.fixture
def reader(page, settings):
    return PageStateReader(page, settings)


async def test_detects_blocks_and_defaults_to_classic():
    assert isinstance(await detect_source(FakePage(mode="blocks")), BlocksStateSource)
    assert isinstance(await detect_source(FakePage(mode="unknown")), ClassicStateSource)


async def test_list_products_classic(page, reader):
    page.listings[CLASSIC.listing.items] = [
        listing_item("Leather Wallet", "€ 25,00", product_id="12"),
        listing_item("", "1.234,50 €", on_sale=True, detail_url="http://shop.test/product/sofa/"),
    ]

    cards = await reader.list_products()

    assert [c.name for c in cards] == ["Leather Wallet", "Product 2"]
    assert cards[0].price == Decimal("25.00")
    assert cards[1].price == Decimal("1234.50")
    assert cards[1].on_sale and not cards[0].on_sale
    assert cards[0].can_add_directly and not cards[1].can_add_directly
    assert cards[0].product_id == "12"
    assert cards[1].detail_url == "http://shop.test/product/sofa/"
    assert cards[1].root_selector == f"{CLASSIC.listing.items} >> nth=1"
    assert cards[1].link_selector.startswith(cards[1].root_selector)


async def test_list_products_falls_back_to_other_mode(settings):
    page = FakePage(mode="blocks")
    page.listings[CLASSIC.listing.items] = [listing_item("Cap", "$18.00")]
    cards = await PageStateReader(page, settings).list_products()
    assert [c.name for c in cards] == ["Cap"]


async def test_list_products_empty_listing(reader):
    with pytest.raises(NotFoundError):
        await reader.list_products()


@pytest.mark.parametrize("price", ["€ 0,00", "Price on request"])
async def test_list_products_rejects_unusable_price(page, reader, price):
    page.listings[CLASSIC.listing.items] = [listing_item("Mystery Box", price)]
    with pytest.raises(ParseError):
        await reader.list_products()


async def test_count_products_takes_either_mode(page, reader):
    page.counts[BLOCKS.listing.items] = 4
    assert await reader.count_products() == 4


async def test_cart_lines_merge_classic_then_blocks(page, reader):
    page.counts[CLASSIC.cart_rows] = 1
    page.row_names[CLASSIC.cart_rows] = ["Leather Wallet"]
    page.row_names[BLOCKS.cart_rows] = ["Hoodie - Blue"]

    lines = await reader.read_cart_lines()

    assert [line.name for line in lines] == ["Leather Wallet", "Hoodie - Blue"]


async def test_empty_cart_reads_as_no_lines(reader):
    assert await reader.read_cart_lines() == []
    assert not await reader.has_cart_rows()


async def test_order_total_from_cart_tier(page, reader):
    page.counts[PAGE_CONTAINERS] = 1
    page.totals[CLASSIC.cart_totals.roots[0]] = "€ 1.234,56"

    total = await reader.read_order_total()

    assert total.amount == Decimal("1234.56")
    assert total.tier == "cart"
    assert total.raw_text == "€ 1.234,56"


async def test_order_total_from_checkout_tier(settings):
    page = FakePage(mode="blocks")
    page.counts[PAGE_CONTAINERS] = 1
    page.totals[BLOCKS.checkout_totals.roots[0]] = "45,00 €"

    total = await PageStateReader(page, settings).read_order_total()

    assert total.amount == Decimal("45.00")
    assert total.tier == "checkout"


async def test_order_total_ignores_trailing_tax_note(page, reader):
    page.counts[PAGE_CONTAINERS] = 1
    page.totals[CLASSIC.cart_totals.roots[0]] = "€ 45,00 (includes € 7,50 VAT)"

    total = await reader.read_order_total()

    assert total.amount == Decimal("45.00")
    assert total.raw_text == "€ 45,00 (includes € 7,50 VAT)"


class LateTotalPage(FakePage):
    """Renders the total only from the ``render_on``-th read on."""

    def __init__(self, render_on: int = 2, **kwargs):
        super().__init__(**kwargs)
        self.render_on = render_on
        self.total_reads = 0

    async def evaluate(self, script, arg=None):
        if script == scripts.READ_TOTAL:
            self.total_reads += 1
            return "€ 10,00" if self.total_reads >= self.render_on else ""
        return await super().evaluate(script, arg)


async def test_order_total_retries_cart_tier_until_rendered(settings):
    page = LateTotalPage()
    page.counts[PAGE_CONTAINERS] = 1

    total = await PageStateReader(page, settings).read_order_total()

    assert total.amount == Decimal("10.00")
    assert total.tier == "cart"
    assert page.total_reads == 2


async def test_order_total_from_known_selectors(page, reader):
    page.counts[PAGE_CONTAINERS] = 1
    page.texts[".order-total .amount"] = "$99.90"
    total = await reader.read_order_total()
    assert total.amount == Decimal("99.90")
    assert total.tier == "known_selectors"


async def test_order_total_unreadable_text_is_parse_error(page, reader):
    page.counts[PAGE_CONTAINERS] = 1
    page.totals[CLASSIC.cart_totals.roots[0]] = "€ N/A"
    with pytest.raises(ParseError) as excinfo:
        await reader.read_order_total()
    assert "€ N/A" in excinfo.value.observed


async def test_order_total_missing_is_not_found(page, reader):
    page.counts[PAGE_CONTAINERS] = 1
    with pytest.raises(NotFoundError):
        await reader.read_order_total()


async def test_order_total_reads_each_tier_its_attempts(settings):
    page = LateTotalPage(render_on=99)
    page.counts[PAGE_CONTAINERS] = 1

    with pytest.raises(NotFoundError):
        await PageStateReader(page, settings).read_order_total()
    assert page.total_reads == settings.timeouts.total_attempts + settings.timeouts.checkout_total_attempts


async def test_order_total_needs_a_container(reader):
    with pytest.raises(WaitTimeoutError):
        await reader.read_order_total()


async def test_order_total_on_closed_page(page, reader):
    page.closed = True
    with pytest.raises(PreconditionError):
        await reader.read_order_total()


async def test_free_shipping_from_method_values(page, reader):
    page.attributes[CLASSIC.shipping_methods] = ["flat_rate:1", "free_shipping:3"]
    assert await reader.has_free_shipping()
    assert not await reader.has_only_paid_shipping()


async def test_paid_shipping_from_method_values(page, reader):
    page.attributes[CLASSIC.shipping_methods] = ["flat_rate:1"]
    assert not await reader.has_free_shipping()
    assert await reader.has_only_paid_shipping()


async def test_blocks_shipping_summary_text(settings):
    page = FakePage(mode="blocks")
    page.all_texts[", ".join(BLOCKS.shipping_summary)] = ["Shipping", "Free shipping"]
    reader = PageStateReader(page, settings)
    shipping = await reader.read_shipping()
    assert shipping.free_shipping
    assert shipping.summary_text == "Shipping Free shipping"


async def test_classic_summary_first_non_empty_area(page, reader):
    page.texts[CLASSIC.shipping_summary[1]] = "Shipping Flat rate: € 5,00"
    page.texts[CLASSIC.shipping_summary[2]] = "Free shipping"
    shipping = await reader.read_shipping()
    assert shipping.summary_text == "Shipping Flat rate: € 5,00"
    assert not shipping.free_shipping


async def test_no_shipping_ui_counts_as_paid_with_warning(reader, caplog):
    with caplog.at_level(logging.WARNING):
        assert await reader.has_only_paid_shipping()
    assert "No shipping options rendered" in caplog.text
    assert not (await reader.read_shipping()).confirmed


async def test_wait_for_shipping_returns_last_read(page, reader):
    page.attributes[CLASSIC.shipping_methods] = ["flat_rate:1"]
    shipping = await reader.wait_for_shipping(lambda s: s.free_shipping)
    assert shipping.method_values == ("flat_rate:1",)


async def test_order_summary_text(page, reader):
    page.texts[CLASSIC.order_summary] = "Leather Wallet × 1"
    assert await reader.read_order_summary() == "Leather Wallet × 1"


def test_sources_expose_their_mode():
    assert ClassicStateSource(FakePage()).mode is RenderMode.CLASSIC
    assert BlocksStateSource(FakePage()).mode is RenderMode.BLOCKS


def test_order_summaries_cover_both_modes():
    assert CLASSIC.order_summary in ORDER_SUMMARIES
    assert BLOCKS.order_summary in ORDER_SUMMARIES
