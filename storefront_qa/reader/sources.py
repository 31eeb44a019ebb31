import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple

from playwright.async_api import Page

from storefront_qa.exceptions import ParseError
from storefront_qa.models import CartLine, ProductCard, RenderMode, ShippingAvailability
from storefront_qa.reader import scripts
from storefront_qa.reader.price import parse_price
from storefront_qa.reader.selectors import BLOCKS, CLASSIC, ModeSelectors, TotalsSelectors


class StateSource(ABC):
    """Reads domain state from one rendering mode of the storefront."""

    mode: RenderMode
    selectors: ModeSelectors

    def __init__(self, page: Page):
        self.page = page

    def __repr__(self):
        return f"<{type(self).__name__} mode={self.mode.value}>"

    async def count(self, selector: str) -> int:
        return await self.page.evaluate(scripts.COUNT, selector)

    async def count_products(self) -> int:
        return await self.count(self.selectors.listing.items)

    async def list_products(self) -> List[ProductCard]:
        listing = self.selectors.listing
        raw_items = await self.page.evaluate(
            scripts.READ_LISTING,
            {
                "items": listing.items,
                "names": listing.names,
                "priceWrapper": listing.price_wrapper,
                "priceCurrent": listing.price_current,
                "saleBadge": listing.sale_badge,
                "addButton": listing.add_button,
                "link": listing.link,
            },
        )
        return [self._build_card(raw, index) for index, raw in enumerate(raw_items or [])]

    def _build_card(self, raw: Dict[str, Any], index: int) -> ProductCard:
        listing = self.selectors.listing
        name = next((n for n in raw.get("names") or [] if n), "") or f"Product {index + 1}"
        price_text = next((p for p in raw.get("prices") or [] if p), "")
        price = parse_price(price_text)
        if price <= 0:
            raise ParseError(f'Price of "{name}" is not positive: {price}', url=self.page.url, observed=price_text)

        root = f"{listing.items} >> nth={index}"
        return ProductCard(
            index=index,
            name=name,
            price=price,
            on_sale=bool(raw.get("onSale")),
            root_selector=root,
            link_selector=f"{root} >> {listing.link}",
            add_selector=f"{root} >> {listing.add_button}" if raw.get("hasAdd") else None,
            product_id=raw.get("productId") or None,
            add_href=raw.get("addHref") or None,
            detail_url=raw.get("detailUrl") or None,
        )

    async def list_cart_lines(self) -> List[CartLine]:
        names = await self.page.evaluate(
            scripts.READ_ROW_NAMES, {"rows": self.selectors.cart_rows, "names": self.selectors.cart_row_names}
        )
        return [CartLine(name=name) for name in names or []]

    async def read_total_text(self, totals: TotalsSelectors) -> str:
        """Text of the labelled total row, or the first money in the totals
        area, or an empty string."""
        return await self.page.evaluate(
            scripts.READ_TOTAL,
            {
                "roots": totals.roots,
                "containers": totals.containers,
                "rows": totals.rows,
                "amounts": totals.amounts,
            },
        )

    async def read_shipping(self) -> ShippingAvailability:
        values = await self.page.evaluate(
            scripts.ATTRIBUTE_VALUES, {"selector": self.selectors.shipping_methods, "attribute": "value"}
        )
        summary = await self.read_shipping_summary()
        shipping = ShippingAvailability(method_values=tuple(v for v in values or [] if v), summary_text=summary)
        logging.debug(f"{self!r} shipping: methods={shipping.method_values}, summary={summary[:120]!r}")
        return shipping

    @abstractmethod
    async def read_shipping_summary(self) -> str:
        """Shipping summary text as rendered by this mode."""


class ClassicStateSource(StateSource):
    mode = RenderMode.CLASSIC
    selectors = CLASSIC

    async def read_shipping_summary(self) -> str:
        # first non-empty area wins
        for selector in self.selectors.shipping_summary:
            text = await self.page.evaluate(scripts.FIRST_TEXT, selector)
            if text:
                return text
        return ""


class BlocksStateSource(StateSource):
    mode = RenderMode.BLOCKS
    selectors = BLOCKS

    async def read_shipping_summary(self) -> str:
        texts = await self.page.evaluate(scripts.ALL_TEXTS, ", ".join(self.selectors.shipping_summary))
        return " ".join(texts or [])


SOURCES = {
    RenderMode.CLASSIC: ClassicStateSource,
    RenderMode.BLOCKS: BlocksStateSource,
}


async def probe_mode(page: Page) -> RenderMode:
    """Probe the page once for mode-distinguishing markers.

    Blocks markers win; classic is assumed when neither mode is recognised.
    """
    found = await page.evaluate(scripts.PROBE_MODE, {"blocks": BLOCKS.markers, "classic": CLASSIC.markers})
    mode = RenderMode.BLOCKS if found.get("blocks") else RenderMode.CLASSIC
    logging.debug(f"Detected {mode.value} rendering on {page.url}")
    return mode


async def detect_source(page: Page) -> StateSource:
    return SOURCES[await probe_mode(page)](page)


async def detect_sources(page: Page) -> Tuple[StateSource, StateSource]:
    """Detected source first, the other mode second."""
    primary = await probe_mode(page)
    secondary = RenderMode.CLASSIC if primary is RenderMode.BLOCKS else RenderMode.BLOCKS
    return SOURCES[primary](page), SOURCES[secondary](page)


def all_sources(page: Page) -> List[StateSource]:
    return [ClassicStateSource(page), BlocksStateSource(page)]
