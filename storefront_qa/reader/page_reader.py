import logging
from typing import Callable, List, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from storefront_qa.config import Settings
from storefront_qa.exceptions import NotFoundError, ParseError, PreconditionError
from storefront_qa.models import CartLine, OrderTotal, ProductCard, ShippingAvailability
from storefront_qa.reader import scripts
from storefront_qa.reader.price import extract_money, looks_monetary, parse_price
from storefront_qa.reader.selectors import BUSY_INDICATORS, KNOWN_TOTAL_VALUES, PAGE_CONTAINERS
from storefront_qa.reader.sources import all_sources, detect_source, detect_sources
from storefront_qa.utils.waits import poll, wait_quietly, wait_until


class PageStateReader:
    """Normalized, read-only view of storefront state on a live page.

    The reader never acts on the page. Every call re-reads the DOM, so callers
    must read again after any mutating action.
    """

    def __init__(self, page: Page, settings: Settings):
        self.page = page
        self.settings = settings
        self.timeouts = settings.timeouts

    @property
    def _interval(self) -> float:
        return self.timeouts.seconds("poll_interval")

    async def count(self, selector: str) -> int:
        try:
            return await self.page.evaluate(scripts.COUNT, selector)
        except PlaywrightError as e:
            # the document may be mid-navigation
            logging.debug(f"Count of {selector!r} failed: {e}")
            return 0

    async def wait_until_idle(self) -> None:
        """Wait, best effort, for async totals recomputation to finish."""

        async def idle():
            return await self.count(BUSY_INDICATORS) == 0

        await wait_quietly(idle, self.timeouts.seconds("spinner"), self._interval, "busy indicators to clear")

    # ------------------------------------------------------------------
    # listing
    # ------------------------------------------------------------------

    async def count_products(self) -> int:
        counts = [await source.count_products() for source in all_sources(self.page)]
        return max(counts)

    async def list_products(self) -> List[ProductCard]:
        """Listing entries in document order.

        The detected mode's listing is the primary location, the other mode's
        listing the fallback.

        Raises:
            NotFoundError: if neither location holds an entry.
            ParseError: if an entry has no positive, readable price.
        """
        for source in await detect_sources(self.page):
            cards = await source.list_products()
            if cards:
                logging.debug(f"Read {len(cards)} product cards from {source!r}")
                return cards
        raise NotFoundError("No products found in the listing.", url=self.page.url)

    # ------------------------------------------------------------------
    # cart
    # ------------------------------------------------------------------

    async def has_cart_rows(self) -> bool:
        for source in all_sources(self.page):
            if await self.count(source.selectors.cart_rows):
                return True
        return False

    async def wait_for_cart_rows(self, attempts: Optional[int] = None) -> bool:
        attempts = attempts or self.timeouts.cart_rows_attempts
        return bool(await poll(self.has_cart_rows, attempts, self._interval))

    async def read_cart_lines(self, attempts: Optional[int] = None) -> List[CartLine]:
        """Cart lines from both modes, classic first.

        An empty cart is a valid result, not an error.
        """
        await self.wait_for_cart_rows(attempts)
        lines: List[CartLine] = []
        for source in all_sources(self.page):
            lines.extend(await source.list_cart_lines())
        return lines

    # ------------------------------------------------------------------
    # totals
    # ------------------------------------------------------------------

    def _to_total(self, text: str, tier: str, unparsed: List[str]) -> Optional[OrderTotal]:
        if not looks_monetary(text):
            return None
        try:
            amount = parse_price(extract_money(text) or text)
        except ParseError:
            unparsed.append(text)
            return None
        logging.debug(f"Order total {amount} read from {tier} tier: {text!r}")
        return OrderTotal(amount=amount, raw_text=text, tier=tier)

    def _ensure_open(self, action: str) -> None:
        if self.page.is_closed():
            raise PreconditionError(f"Page already closed before {action}.")

    async def read_order_total(self) -> OrderTotal:
        """Read the monetary total shown on a cart or checkout page.

        Raises:
            WaitTimeoutError: if no cart or checkout container ever attaches.
            ParseError: if total text was found but never read as a number.
            NotFoundError: if no monetary text was found in any tier.
        """
        self._ensure_open("reading order total")

        async def container_attached():
            return await self.count(PAGE_CONTAINERS) > 0

        await wait_until(
            container_attached,
            self.timeouts.seconds("container"),
            self._interval,
            "a cart or checkout container",
            url=self.page.url,
        )
        await self.wait_until_idle()

        source = await detect_source(self.page)
        unparsed: List[str] = []
        tiers = [
            ("cart", source.selectors.cart_totals, self.timeouts.total_attempts),
            ("checkout", source.selectors.checkout_totals, self.timeouts.checkout_total_attempts),
        ]
        for tier, totals, attempts in tiers:

            async def read_tier(tier=tier, totals=totals) -> Optional[OrderTotal]:
                self._ensure_open("reading order total")
                try:
                    text = await source.read_total_text(totals)
                except PlaywrightError as e:
                    logging.debug(f"Reading {tier} total failed: {e}")
                    text = ""
                total = self._to_total(text, tier, unparsed)
                if not total:
                    await self.wait_until_idle()
                return total

            total = await poll(read_tier, attempts, self.timeouts.seconds("total_retry_interval"))
            if total:
                return total

        for selector in KNOWN_TOTAL_VALUES:
            text = await self.page.evaluate(scripts.FIRST_TEXT, selector)
            total = self._to_total(text, "known_selectors", unparsed)
            if total:
                return total

        if unparsed:
            raise ParseError("Order total is not a readable number.", url=self.page.url, observed=" | ".join(unparsed))
        raise NotFoundError("Could not find order total on the page.", url=self.page.url)

    # ------------------------------------------------------------------
    # shipping
    # ------------------------------------------------------------------

    async def read_shipping(self) -> ShippingAvailability:
        primary, fallback = await detect_sources(self.page)
        shipping = await primary.read_shipping()
        if shipping.confirmed:
            return shipping
        return await fallback.read_shipping()

    async def wait_for_shipping(
        self, predicate: Optional[Callable[[ShippingAvailability], bool]] = None
    ) -> ShippingAvailability:
        """Poll shipping options until ``predicate`` holds (by default: any
        shipping UI rendered); returns the last read either way."""
        predicate = predicate or (lambda shipping: shipping.confirmed)
        last = ShippingAvailability()

        async def satisfied():
            nonlocal last
            last = await self.read_shipping()
            return predicate(last)

        await wait_quietly(satisfied, self.timeouts.seconds("shipping_ui"), self._interval, "shipping options")
        return last

    async def has_free_shipping(self) -> bool:
        return (await self.read_shipping()).free_shipping

    async def has_only_paid_shipping(self) -> bool:
        shipping = await self.read_shipping()
        if shipping.free_shipping:
            return False
        if shipping.paid_options:
            return True
        if not shipping.confirmed:
            logging.warning(f"No shipping options rendered on {self.page.url}; reporting paid-only shipping unconfirmed")
        return True

    async def read_order_summary(self) -> str:
        source = await detect_source(self.page)
        return await self.page.evaluate(scripts.FIRST_TEXT, source.selectors.order_summary)
