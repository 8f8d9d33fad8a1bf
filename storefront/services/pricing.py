import math
import re

from storefront.errors import CorruptedCatalogError

CURRENCY_GLYPH = "€"

_NUMBER = re.compile(r"\d+(\.\d+)?")


def parse_price(text: str) -> float:
    """
    Convert a price such as ``"7,50€"`` or ``"12€"`` into a float.

    Returns ``math.nan`` when what remains after stripping the currency glyph
    and swapping the decimal comma is not a plain base-10 number.
    """
    if not isinstance(text, str):
        return math.nan
    cleaned = text.replace(CURRENCY_GLYPH, "").replace(",", ".", 1).strip()
    if not _NUMBER.fullmatch(cleaned):
        return math.nan
    return float(cleaned)


def require_price(text: str) -> float:
    amount = parse_price(text)
    if math.isnan(amount):
        raise CorruptedCatalogError(f"Unparseable price {text!r}")
    return amount
