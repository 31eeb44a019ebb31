"""JavaScript payloads evaluated in the page.

Each payload takes a single JSON argument and returns plain JSON, so every
cascade and normalization step stays on the Python side.
"""

COUNT = "(selector) => document.querySelectorAll(selector).length"

FIRST_TEXT = """(selector) => {
    const el = document.querySelector(selector);
    return el ? (el.textContent || '').trim() : '';
}"""

ALL_TEXTS = """(selector) => Array.from(document.querySelectorAll(selector))
    .map((el) => (el.textContent || '').trim())
    .filter((t) => t)"""

ATTRIBUTE_VALUES = """(cfg) => Array.from(document.querySelectorAll(cfg.selector))
    .map((el) => el.getAttribute(cfg.attribute) || '')"""

PROBE_MODE = """(cfg) => ({
    blocks: !!document.querySelector(cfg.blocks),
    classic: !!document.querySelector(cfg.classic),
})"""

READ_LISTING = """(cfg) => {
    const text = (el) => (el && el.textContent ? el.textContent.trim() : '');
    const visible = (el) => !!el && !!(el.offsetWidth || el.offsetHeight || el.getClientRects().length);
    return Array.from(document.querySelectorAll(cfg.items)).map((item) => {
        const wrap = item.querySelector(cfg.priceWrapper);
        const prices = wrap ? cfg.priceCurrent.map((s) => text(wrap.querySelector(s))).concat([text(wrap)]) : [];
        const add = item.querySelector(cfg.addButton);
        const link = item.querySelector(cfg.link);
        return {
            names: cfg.names.map((s) => text(item.querySelector(s))),
            prices: prices,
            onSale: visible(item.querySelector(cfg.saleBadge)),
            hasAdd: !!add,
            productId: add ? add.getAttribute('data-product_id') || '' : '',
            addHref: add ? add.getAttribute('href') || '' : '',
            detailUrl: link ? link.href || '' : '',
        };
    });
}"""

READ_ROW_NAMES = """(cfg) => Array.from(document.querySelectorAll(cfg.rows)).map((row) => {
    for (const s of cfg.names) {
        const el = row.querySelector(s);
        const t = el ? (el.innerText || el.textContent || '').trim() : '';
        if (t) return t;
    }
    return '';
}).filter((t) => t)"""

READ_TOTAL = """(cfg) => {
    const moneyRx = /[€$£]\\s*[\\d.,]+|[\\d.,]+\\s*[€$£]/;
    const txt = (el) => (el && el.textContent ? el.textContent.trim() : '');
    for (const rootSel of cfg.roots) {
        const root = document.querySelector(rootSel);
        if (!root) continue;
        const area = cfg.containers ? root.querySelector(cfg.containers) : root;
        if (!area) continue;
        for (const row of Array.from(area.querySelectorAll(cfg.rows))) {
            const t = txt(row);
            if (!/total/i.test(t)) continue;
            const el = row.querySelector(cfg.amounts)
                || Array.from(row.querySelectorAll('*')).find((n) => moneyRx.test(n.textContent || ''));
            if (el) return txt(el);
            const m = t.match(moneyRx);
            if (m) return m[0].trim();
        }
        const any = txt(area).match(moneyRx);
        if (any) return any[0].trim();
    }
    return '';
}"""

FIRST_ENABLED_OPTION = """(el) => {
    const found = Array.from(el.options).find((o) => !!o.value && !o.disabled);
    return found ? found.value : '';
}"""

FIND_LABELLED_RADIO = """(cfg) => {
    const rx = new RegExp(cfg.pattern, 'i');
    for (const area of Array.from(document.querySelectorAll(cfg.areas))) {
        for (const input of Array.from(area.querySelectorAll('input[type="radio"]'))) {
            const label = input.closest('label')
                || (input.id && document.querySelector('label[for="' + CSS.escape(input.id) + '"]'))
                || input.parentElement;
            const labelText = label ? label.textContent || '' : '';
            if ((rx.test(labelText) || rx.test(input.value || '')) && input.id) {
                return '#' + CSS.escape(input.id);
            }
        }
    }
    return '';
}"""

PAGE_IS_BLANK = "() => !document.body || document.body.innerText.trim().length === 0"
