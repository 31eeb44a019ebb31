import logging
from typing import Dict, List

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from storefront_qa.config import BillingDetails
from storefront_qa.reader import scripts
from storefront_qa.reader.selectors import BLOCKS, CLASSIC

# candidate inputs per billing field, classic ids first, then blocks ids
BILLING_FIELDS: Dict[str, List[str]] = {
    "first_name": ["#billing_first_name", '[name="billing_first_name"]', "#billing-first_name", "#shipping-first_name"],
    "last_name": ["#billing_last_name", '[name="billing_last_name"]', "#billing-last_name", "#shipping-last_name"],
    "address_1": ["#billing_address_1", '[name="billing_address_1"]', "#billing-address_1", "#shipping-address_1"],
    "city": ["#billing_city", '[name="billing_city"]', "#billing-city", "#shipping-city"],
    "postcode": ["#billing_postcode", '[name="billing_postcode"]', "#billing-postcode", "#shipping-postcode"],
    "phone": ["#billing_phone", '[name="billing_phone"]', "#billing-phone", "#shipping-phone"],
    "email": ["#billing_email", '[name="billing_email"]', "#email", 'input[type="email"]'],
}

FIRST_NAME_INPUTS = ", ".join(
    BILLING_FIELDS["first_name"] + ['input[placeholder*="First"]', 'input[aria-label*="First"]', 'input[name*="first_name"]']
)


async def fill_billing_fields(page: Page, details: BillingDetails) -> List[str]:
    """Fill every billing field that has a matching input.

    Fields without a candidate input are skipped. Returns the names of the
    fields that were filled.
    """
    filled = []
    for field, selectors in BILLING_FIELDS.items():
        value = getattr(details, field)
        for selector in selectors:
            element = page.locator(selector).first
            if not await element.count():
                continue
            try:
                await element.fill(value)
                filled.append(field)
                break
            except PlaywrightError as e:
                logging.debug(f"Could not fill {field} via {selector}: {e}")
        else:
            logging.debug(f"No input found for billing field {field}, skipping")
    return filled


async def select_pay_on_delivery(page: Page, label_pattern: str) -> bool:
    """Choose the cash-on-delivery payment method in whichever mode renders it."""
    classic = page.locator(CLASSIC.cod_input)
    if await classic.count():
        try:
            await classic.first.check()
            return True
        except PlaywrightError as e:
            logging.debug(f"Could not check classic pay-on-delivery input: {e}")

    if await page.locator(BLOCKS.payment_area).count():
        selector = await page.evaluate(
            scripts.FIND_LABELLED_RADIO, {"areas": BLOCKS.payment_area, "pattern": label_pattern}
        )
        if selector:
            try:
                await page.locator(selector).first.check()
                return True
            except PlaywrightError as e:
                logging.debug(f"Could not check blocks payment radio {selector}: {e}")

    logging.debug("No pay-on-delivery payment method selected")
    return False
