import logging
import re
from typing import Callable, List, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from storefront_qa.config import BillingDetails, Settings
from storefront_qa.exceptions import NotFoundError, PreconditionError, WaitTimeoutError
from storefront_qa.flows.checkout_form import FIRST_NAME_INPUTS, fill_billing_fields, select_pay_on_delivery
from storefront_qa.models import CartLine, ProductCard
from storefront_qa.reader import scripts
from storefront_qa.reader.page_reader import PageStateReader
from storefront_qa.reader.selectors import BLOCKS, CART_CONTAINERS, CHECKOUT_INDICATORS, CLASSIC
from storefront_qa.reader.sources import StateSource, all_sources
from storefront_qa.utils.log_icon import icon
from storefront_qa.utils.waits import wait_until

ADD_TO_CART_PARAM = re.compile(r"[?&]add-to-cart=(\d+)", re.IGNORECASE)

OPTION_SELECTS = 'form.cart select[name^="attribute_"]'
QUANTITY_INPUT = 'form.cart input[name="quantity"], form.cart .qty'
SINGLE_ADD_BUTTON = "button.single_add_to_cart_button"
PROCEED_TO_CHECKOUT = 'a.checkout-button, a:has-text("Proceed to checkout")'
CHECKOUT_WRAPPER = "form.checkout, .wc-block-checkout"
CHECKOUT_SUBMIT = (
    "button#place_order, button.wc-block-components-checkout-place-order-button, "
    'button:has-text("Continue"), button:has-text("Proceed")'
)
CONFIRMATION_NOTICE = (
    ".woocommerce-notice.woocommerce-notice--success, .woocommerce-thankyou-order-received, "
    ".wc-block-order-confirmation-status"
)

ProductPredicate = Callable[[ProductCard], bool]


def resolve_product_id(card: ProductCard) -> Optional[str]:
    """Backing product id of a directly addable card, from its data
    attribute or from the ``add-to-cart`` query parameter of its link."""
    if card.product_id:
        return card.product_id
    match = ADD_TO_CART_PARAM.search(card.add_href or "")
    return match.group(1) if match else None


class FlowSequencer:
    """Drives shopping journeys through the storefront one action at a time.

    Each action is followed by a bounded wait on the state the reader reports;
    there are no unconditional sleeps.
    """

    def __init__(self, page: Page, settings: Settings, reader: Optional[PageStateReader] = None):
        self.page = page
        self.settings = settings
        self.paths = settings.paths
        self.timeouts = settings.timeouts
        self.reader = reader or PageStateReader(page, settings)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    async def _goto(self, path: str, load_state: str = "domcontentloaded"):
        url = self.settings.url(path)
        logging.debug(f"Navigating to {url}")
        return await self.page.goto(url, wait_until=load_state, timeout=self.timeouts.navigation)

    async def _click_and_wait(self, locator: Locator) -> None:
        await locator.click()
        await self.page.wait_for_load_state("domcontentloaded")

    async def _expect_visible(self, locator: Locator, what: str) -> None:
        try:
            await locator.wait_for(state="visible", timeout=self.timeouts.element)
        except PlaywrightTimeoutError as e:
            raise NotFoundError(f"{what} never became visible.", url=self.page.url) from e

    def _on_cart_page(self) -> bool:
        url = self.page.url or ""
        return any(path in url for path in [self.paths.cart, *self.paths.cart_fallbacks])

    # ------------------------------------------------------------------
    # listing
    # ------------------------------------------------------------------

    async def goto_listing(self) -> None:
        """Open the shop listing, falling back to the home page.

        Raises:
            NotFoundError: if neither page lists a product.
        """
        await self._goto(self.paths.shop)
        if await self.reader.count_products():
            return
        logging.info(f"No products at {self.paths.shop}, falling back to {self.paths.home}")
        await self._goto(self.paths.home)
        if not await self.reader.count_products():
            raise NotFoundError("No products listed on the shop page or the home page.", url=self.page.url)

    async def list_products(self) -> List[ProductCard]:
        await self.goto_listing()
        return await self.reader.list_products()

    # ------------------------------------------------------------------
    # adding to cart
    # ------------------------------------------------------------------

    async def add_directly(self, card: ProductCard) -> None:
        """Deterministic add of a simple product by id, then open the cart."""
        product_id = resolve_product_id(card)
        if not product_id:
            raise NotFoundError(f'Could not determine product id for "{card.name}".', url=self.page.url)
        await self._goto(self.paths.add_to_cart.format(product_id=product_id))
        await self.goto_cart()

    async def choose_first_options(self) -> int:
        """Pick the first enabled value of every option selector on a detail page."""
        selects = self.page.locator(OPTION_SELECTS)
        chosen = 0
        for i in range(await selects.count()):
            select = selects.nth(i)
            value = await select.evaluate(scripts.FIRST_ENABLED_OPTION)
            if value:
                await select.select_option(value)
                chosen += 1
        return chosen

    async def add_from_detail(self, card: Optional[ProductCard] = None, quantity: int = 1) -> None:
        """Add through the product detail page, which handles configurable
        products. Opens the detail page first when ``card`` is given."""
        if card is not None:
            if card.detail_url:
                await self._goto(card.detail_url)
            else:
                link = self.page.locator(card.link_selector).first
                if not await link.count():
                    # card selectors are relative to the listing
                    await self.goto_listing()
                if not await link.count():
                    raise NotFoundError(f'Product link not found for "{card.name}".', url=self.page.url)
                await self._click_and_wait(link)

        await self.choose_first_options()

        if quantity != 1:
            quantity_input = self.page.locator(QUANTITY_INPUT).first
            if await quantity_input.count():
                await quantity_input.fill(str(quantity))
            else:
                logging.warning(f"No quantity input on {self.page.url}; adding a single unit")

        button = self.page.locator(SINGLE_ADD_BUTTON).first
        await self._expect_visible(button, "Add to cart button")
        await self._click_and_wait(button)

        view_cart = self.page.locator(self._view_cart_selector())
        if await view_cart.count():
            await self._click_and_wait(view_cart.first)
            await self.goto_cart(navigate=False)
        else:
            await self.goto_cart()

    def _view_cart_selector(self) -> str:
        labels = [f'a:has-text("{label}")' for label in self.settings.view_cart_labels]
        return ", ".join(labels + [f'a[href*="{self.paths.cart.rstrip("/")}"]'])

    async def add_to_cart(self, card: ProductCard, quantity: int = 1) -> ProductCard:
        """Direct add for a single unit of a product with a known id, detail
        page otherwise."""
        if card.can_add_directly and quantity == 1 and resolve_product_id(card):
            await self.add_directly(card)
        else:
            await self.add_from_detail(card, quantity=quantity)
        return card

    async def add_first_matching(self, predicate: ProductPredicate, description: str, quantity: int = 1) -> ProductCard:
        """Add the first listed product satisfying ``predicate``.

        Raises:
            NotFoundError: if no listed product matches.
        """
        cards = await self.list_products()
        card = next((c for c in cards if predicate(c)), None)
        if card is None:
            raise NotFoundError(f"No {description} product found.", url=self.page.url)
        logging.info(f"{icon['cart']} Adding {description} product: {card.name} ({card.price})")
        return await self.add_to_cart(card, quantity=quantity)

    async def add_first_non_sale(self) -> ProductCard:
        return await self.add_first_matching(lambda c: not c.on_sale, "non-sale")

    async def add_first_sale(self) -> ProductCard:
        return await self.add_first_matching(lambda c: c.on_sale, "on-sale")

    async def add_any_purchasable(self) -> ProductCard:
        """Prefer a directly addable product, else add the first one through
        its detail page."""
        cards = await self.list_products()
        card = next((c for c in cards if c.can_add_directly), cards[0])
        return await self.add_to_cart(card)

    # ------------------------------------------------------------------
    # cart
    # ------------------------------------------------------------------

    async def open_cart(self) -> None:
        """Make sure a cart container of either mode is on screen."""
        if not self._on_cart_page():
            try:
                await self._goto(self.paths.cart)
            except PlaywrightError as e:
                logging.warning(f"Navigation to {self.paths.cart} failed: {e}")

        await self.reader.wait_until_idle()

        containers = self.page.locator(CART_CONTAINERS)
        if not await containers.count():
            for path in self.paths.cart_fallbacks:
                try:
                    await self._goto(path)
                except PlaywrightError as e:
                    logging.debug(f"Navigation to {path} failed: {e}")
                    continue
                if await containers.count():
                    break

        await self._expect_visible(containers.first, "Cart container")

    async def goto_cart(self, navigate: bool = True) -> None:
        """Open the cart and wait, bounded, for its rows to render."""
        if navigate:
            try:
                await self._goto(self.paths.cart, load_state="networkidle")
            except PlaywrightError as e:
                logging.warning(f"Navigation to {self.paths.cart} failed: {e}")
        await self.open_cart()
        await self.reader.wait_until_idle()
        await self.reader.wait_for_cart_rows()

    async def _remove_all_rows(self, source: StateSource) -> int:
        removed = 0
        rows = self.page.locator(source.selectors.cart_rows)
        while True:
            count = await self.reader.count(source.selectors.cart_rows)
            if not count:
                return removed
            await rows.first.locator(source.selectors.remove_line).first.click()

            async def shrunk(expected=count - 1):
                return await self.reader.count(source.selectors.cart_rows) == expected

            await wait_until(
                shrunk,
                self.timeouts.seconds("removal"),
                self.timeouts.seconds("poll_interval"),
                f"{source.mode.value} cart to shrink from {count} to {count - 1} rows",
                url=self.page.url,
            )
            removed += 1

    async def clear_cart(self) -> int:
        """Remove every cart line, one verified removal at a time.

        Returns:
            The number of removals performed; zero on an already empty cart.

        Raises:
            WaitTimeoutError: if a removal does not shrink the cart by one row.
        """
        for path in [self.paths.cart, *self.paths.cart_fallbacks]:
            try:
                await self._goto(path)
                break
            except PlaywrightError as e:
                logging.debug(f"Navigation to {path} failed: {e}")

        removed = 0
        for source in all_sources(self.page):
            removed += await self._remove_all_rows(source)
        logging.info(f"{icon['cart']} Cart cleared, {removed} line(s) removed")
        return removed

    async def assert_cart_has(self, expected_names: Sequence[str]) -> List[CartLine]:
        """Check that real cart rows name every expected product.

        Raises:
            PreconditionError: with the observed rows, if there are fewer rows
                than expected names or a name is missing.
        """
        lines = await self.reader.read_cart_lines(attempts=self.timeouts.assert_rows_attempts)
        names = [line.name for line in lines]
        haystack = " | ".join(names)

        if len(names) < len(expected_names):
            raise PreconditionError(
                f"Expected at least {len(expected_names)} cart row(s), observed {len(names)} rows.",
                url=self.page.url,
                observed=haystack or "(no rows)",
            )
        for name in expected_names:
            if not re.search(re.escape(name), haystack, re.IGNORECASE):
                raise PreconditionError(f"Missing in cart: {name}", url=self.page.url, observed=haystack)
        return lines

    # ------------------------------------------------------------------
    # checkout
    # ------------------------------------------------------------------

    async def reach_checkout(self) -> None:
        """Reach the checkout form directly, by path, or through the cart.

        Raises:
            NotFoundError: if no checkout indicator becomes visible.
        """
        indicators = self.page.locator(CHECKOUT_INDICATORS)
        if await indicators.count():
            await self._expect_visible(indicators.first, "Checkout form")
            return

        try:
            await self._goto(self.paths.checkout)
        except PlaywrightError as e:
            logging.warning(f"Navigation to {self.paths.checkout} failed: {e}")
        if await indicators.count():
            await self._expect_visible(indicators.first, "Checkout form")
            return

        await self.open_cart()
        proceed = self.page.locator(PROCEED_TO_CHECKOUT).first
        if await proceed.count():
            await self._click_and_wait(proceed)
        await self._expect_visible(indicators.first, "Checkout form")

    async def expect_checkout_form(self) -> None:
        """The checkout wrapper, a first-name field and a submit control are visible."""
        await self._expect_visible(self.page.locator(CHECKOUT_WRAPPER).first, "Checkout wrapper")
        await self._expect_visible(self.page.locator(FIRST_NAME_INPUTS).first, "Billing first name field")
        await self._expect_visible(self.page.locator(CHECKOUT_SUBMIT).first, "Place order button")

    async def fill_checkout_minimal(self, details: Optional[BillingDetails] = None) -> List[str]:
        """Best-effort fill of billing fields and pay-on-delivery selection."""
        details = details or self.settings.billing
        filled = await fill_billing_fields(self.page, details)
        paid_on_delivery = await select_pay_on_delivery(self.page, self.settings.payment_label_pattern)
        logging.debug(f"Checkout fields filled: {filled}; pay on delivery selected: {paid_on_delivery}")
        return filled

    async def place_order(self) -> bool:
        """Click whichever place-order button is present.

        Returns False, without raising, when neither mode renders one.
        """
        for selector in (BLOCKS.place_order, CLASSIC.place_order):
            button = self.page.locator(selector)
            if await button.count():
                await self._click_and_wait(button.first)
                return True
        logging.warning(f"No place order button on {self.page.url}")
        return False

    async def wait_for_order_confirmation(self) -> str:
        """Wait for the order-received page and return its success notice.

        Raises:
            WaitTimeoutError: if the confirmation page never loads.
            NotFoundError: if the notice is missing or names no accepted phrase.
        """
        pattern = re.compile(re.escape(self.paths.order_received))
        try:
            await self.page.wait_for_url(pattern, timeout=self.timeouts.confirmation)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError("Order confirmation page never loaded.", url=self.page.url) from e

        notice = self.page.locator(CONFIRMATION_NOTICE).first
        await self._expect_visible(notice, "Order confirmation notice")
        text = (await notice.inner_text()).strip()
        if not any(phrase.lower() in text.lower() for phrase in self.settings.confirmation_phrases):
            raise NotFoundError("Order confirmation notice has no success phrase.", url=self.page.url, observed=text)
        logging.info(f"{icon['success']} Order confirmed: {text[:80]}")
        return text
