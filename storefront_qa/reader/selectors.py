"""CSS selectors for the two storefront rendering modes."""

from dataclasses import dataclass
from typing import List

# async recomputation indicators, both modes
BUSY_INDICATORS = ".wc-block-components-loading-mask, .wc-block-components-spinner, .blockUI.blockOverlay"

AMOUNT_ELEMENTS = ".wc-block-components-formatted-money-amount, .amount, .woocommerce-Price-amount, bdi"

# last tier of the order total search
KNOWN_TOTAL_VALUES = [
    ".cart_totals .order-total .amount",
    ".order-total .amount",
    ".woocommerce-Price-amount bdi",
    ".wc-block-cart__totals .wc-block-components-formatted-money-amount",
    ".wc-block-components-totals-footer-item .wc-block-components-formatted-money-amount",
    ".wc-block-components-totals-item__value",
    ".wc-block-components-order-summary-item__total-price",
]


@dataclass(frozen=True)
class ListingSelectors:
    items: str
    names: List[str]
    price_wrapper: str
    price_current: List[str]
    sale_badge: str
    add_button: str
    link: str


@dataclass(frozen=True)
class TotalsSelectors:
    roots: List[str]
    rows: str
    containers: str = ""
    amounts: str = AMOUNT_ELEMENTS


@dataclass(frozen=True)
class ModeSelectors:
    markers: str
    listing: ListingSelectors
    cart_rows: str
    cart_row_names: List[str]
    remove_line: str
    cart_container: str
    checkout_container: str
    cart_totals: TotalsSelectors
    checkout_totals: TotalsSelectors
    shipping_methods: str
    shipping_summary: List[str]
    order_summary: str
    payment_area: str
    place_order: str
    cod_input: str = ""


CLASSIC = ModeSelectors(
    markers="form.woocommerce-cart-form, .cart_totals, form.checkout, ul.products li.product",
    listing=ListingSelectors(
        items="ul.products li.product",
        names=["h2", "h3", ".woocommerce-loop-product__title"],
        price_wrapper=".price",
        price_current=["ins .amount", ".amount"],
        sale_badge=".onsale",
        add_button="a.ajax_add_to_cart, a.add_to_cart_button, button.add_to_cart_button",
        link="a.woocommerce-LoopProduct-link, a.woocommerce-loop-product__link, a:has(h2), a:has(h3)",
    ),
    cart_rows="table.shop_table.cart tr.cart_item, tr.cart_item",
    cart_row_names=["td.product-name a", "td.product-name"],
    remove_line="a.remove",
    cart_container=".woocommerce-cart-form, p.cart-empty, .cart-empty, table.shop_table.cart, .cart_totals",
    checkout_container="form.checkout",
    cart_totals=TotalsSelectors(roots=[".cart_totals"], rows=".order-total"),
    checkout_totals=TotalsSelectors(roots=["form.checkout"], rows="tr.order-total, .order-total"),
    shipping_methods='input[name^="shipping_method"]',
    shipping_summary=[".woocommerce-shipping-totals", ".cart_totals", ".woocommerce-checkout-review-order-table"],
    order_summary=".woocommerce-checkout-review-order-table",
    payment_area="#payment, .wc_payment_methods",
    place_order='#place_order, button[name="woocommerce_checkout_place_order"]',
    cod_input='input#payment_method_cod, input[name="payment_method"][value="cod"]',
)

BLOCKS = ModeSelectors(
    markers=(
        ".wc-block-cart, .wp-block-woocommerce-cart, .wc-block-checkout, .wp-block-woocommerce-checkout, "
        ".wc-block-product-template, .wc-block-grid__products"
    ),
    listing=ListingSelectors(
        items="ul.wc-block-product-template li.wc-block-product, .wc-block-grid__products .wc-block-grid__product",
        names=["h2", "h3", ".wc-block-components-product-name", ".wc-block-grid__product-title"],
        price_wrapper=".wc-block-components-product-price, .wc-block-grid__product-price, .price",
        price_current=["ins .amount", "ins", ".amount"],
        sale_badge=".wc-block-components-product-sale-badge, .wc-block-grid__product-onsale, .onsale",
        add_button="a.add_to_cart_button, button.add_to_cart_button, a.ajax_add_to_cart",
        link="a.wc-block-grid__product-link, a.wc-block-components-product-name, a:has(h2), a:has(h3)",
    ),
    cart_rows=".wc-block-cart-items .wc-block-cart-items__row, .wc-block-cart-item",
    cart_row_names=[".wc-block-cart-item__product-name", ".wc-block-components-product-name", 'a[rel="product"]'],
    remove_line='button[aria-label^="Remove"], .wc-block-cart-item__remove-link',
    cart_container=(
        ".wc-block-cart, .wp-block-woocommerce-cart, .wc-block-cart__empty-cart, "
        ".wc-block-components-totals, .wc-block-cart-items"
    ),
    checkout_container=".wp-block-woocommerce-checkout, .wc-block-checkout",
    cart_totals=TotalsSelectors(
        roots=[".wc-block-cart"],
        containers=".wc-block-cart__totals, .wc-block-components-totals, .wc-block-components-totals-footer",
        rows=".wc-block-components-totals-item, .wc-block-components-totals-footer-item",
    ),
    checkout_totals=TotalsSelectors(
        roots=[".wp-block-woocommerce-checkout", ".wc-block-checkout"],
        rows=(
            ".wc-block-components-totals-item, .wc-block-components-totals-footer-item, "
            ".wc-block-checkout__order-summary"
        ),
    ),
    shipping_methods=(
        '.wc-block-components-shipping-rates-control input[type="radio"], '
        '.wc-block-checkout__shipping-methods input[type="radio"]'
    ),
    shipping_summary=[
        ".wc-block-components-radio-control",
        ".wc-block-components-totals",
        ".wc-block-checkout__shipping-methods",
    ],
    order_summary=".wc-block-components-order-summary",
    payment_area=".wc-block-components-radio-control, .wc-block-checkout__payment-methods",
    place_order="button.wc-block-components-checkout-place-order-button",
)

# any cart or checkout container, either mode
PAGE_CONTAINERS = ", ".join(
    [CLASSIC.cart_container, CLASSIC.checkout_container, BLOCKS.cart_container, BLOCKS.checkout_container]
)

CHECKOUT_INDICATORS = (
    "form.checkout, #customer_details, .woocommerce-checkout-review-order-table, "
    ".wc-block-checkout, .wp-block-woocommerce-checkout"
)

CART_CONTAINERS = ", ".join([CLASSIC.cart_container, BLOCKS.cart_container])
ORDER_SUMMARIES = ", ".join([CLASSIC.order_summary, BLOCKS.order_summary])
