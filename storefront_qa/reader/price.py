import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from storefront_qa.exceptions import ParseError

# currency symbol before or after a digit group: "€ 1.234,56", "70,00 €", "$12"
MONEY_RE = re.compile(r"[€$£]\s*[\d.,]+|[\d.,]+\s*[€$£]")
_DIGIT_GROUP_RE = re.compile(r"\d[\d.,]*")
_NOT_NUMERIC_RE = re.compile(r"[^\d.,-]")
_NUMBER_RE = re.compile(r"^-?(\d+(\.\d*)?|\.\d+)$")


def _has_several_numbers(text: str) -> bool:
    # digit groups split by anything but whitespace: "12.50 – 20.00", "10-20", "1 of 3"
    groups = list(_DIGIT_GROUP_RE.finditer(text))
    return any(
        text[prev.end():cur.start()].strip()
        for prev, cur in zip(groups, groups[1:])
    )


def parse_price(text: str) -> Decimal:
    """Parse a rendered price into a Decimal.

    When both "." and "," appear, the last one is the decimal separator and
    the other one groups thousands. A lone "," is a decimal separator; several
    "," without any "." are thousands separators. A "-" is only accepted as a
    leading sign.

    Raises:
        ParseError: if no number remains after cleaning, or the text holds
            more than one number (a price range such as "€12 – €20").
    """
    if text is None:
        raise ParseError("Could not parse price from: None")
    if _has_several_numbers(text):
        raise ParseError(f'Ambiguous price, several numbers in: "{text}"', observed=text)

    cleaned = _NOT_NUMERIC_RE.sub("", text)
    negative = cleaned.startswith("-")
    if negative:
        cleaned = cleaned[1:]
    if "-" in cleaned:
        raise ParseError(f'Could not parse price from: "{text}"', observed=text)

    if "." in cleaned and "," in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            normalized = cleaned.replace(".", "").replace(",", ".")
        else:
            normalized = cleaned.replace(",", "")
    elif cleaned.count(",") == 1:
        normalized = cleaned.replace(",", ".")
    elif cleaned.count(",") > 1:
        normalized = cleaned.replace(",", "")
    elif cleaned.count(".") > 1:
        normalized = cleaned.replace(".", "")
    else:
        normalized = cleaned

    if negative:
        normalized = f"-{normalized}"

    if not _NUMBER_RE.match(normalized):
        raise ParseError(f'Could not parse price from: "{text}"', observed=text)
    try:
        return Decimal(normalized)
    except InvalidOperation as e:
        raise ParseError(f'Could not parse price from: "{text}"', observed=text) from e


def extract_money(text: Optional[str]) -> Optional[str]:
    """Return the first currency-looking substring of ``text``."""
    if not text:
        return None
    match = MONEY_RE.search(text)
    return match.group(0).strip() if match else None


def looks_monetary(text: Optional[str]) -> bool:
    return bool(text) and bool(re.search(r"[\d€£$]", text))
