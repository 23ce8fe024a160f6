"""Price parsing.

Turns raw price-bearing text such as ``"₹1,299.00"``, ``"$29.99"`` or
``"1,299."`` into a positive ``Decimal``. Callers pass ``","`` as the
decimal separator for pages that write prices as ``"1.299,00 €"``.
Strategies call this for every selector candidate while probing a page, so
it must stay cheap, pure and deterministic.
"""

import re
from decimal import Decimal, InvalidOperation

from ..errors import PriceParseError

# Currency words and abbreviations such as "Rs." or "USD"
CURRENCY_WORD_RE = re.compile(r"[^\W\d_]+\.?")
NON_PRICE_CHARS_RE = re.compile(r"[^0-9.]")
DECIMAL_SEPARATORS = (".", ",")


def _clean_price_text(raw: str, decimal_separator: str) -> str:
    """Keep only digits and decimal points, then normalize dangling points."""
    cleaned = CURRENCY_WORD_RE.sub("", raw.strip())
    if decimal_separator == ",":
        # "1.299,00" -> "1299.00"
        cleaned = cleaned.replace(".", "").replace(",", ".")
    cleaned = NON_PRICE_CHARS_RE.sub("", cleaned)

    # "1299." or ".99"
    if cleaned.endswith("."):
        cleaned = cleaned[:-1]
    if cleaned.startswith("."):
        cleaned = "0" + cleaned
    return cleaned


def parse_price(raw: str | None, decimal_separator: str = ".") -> Decimal:
    """Parse a raw price string into a strictly positive Decimal.

    Currency glyphs and words, thousands separators and whitespace are
    dropped; only digits and a single decimal point are kept.

    Args:
        raw: Text or attribute value taken from a price element.
        decimal_separator: "." for "1,299.00" style prices, "," for
            "1.299,00" style prices.

    Returns:
        Parsed price.

    Raises:
        PriceParseError: If nothing numeric remains, the remainder is not a
            valid decimal, or the value is not greater than zero.
    """
    if decimal_separator not in DECIMAL_SEPARATORS:
        raise ValueError(f"Unsupported decimal separator: {decimal_separator!r}")
    if raw is None:
        raise PriceParseError(raw, "no text")

    cleaned = _clean_price_text(raw, decimal_separator)
    if not cleaned:
        raise PriceParseError(raw, "no digits")
    if cleaned.count(".") > 1:
        raise PriceParseError(raw, "more than one decimal point")

    try:
        value = Decimal(cleaned)
    except InvalidOperation as e:
        raise PriceParseError(raw, "invalid decimal") from e

    if value <= 0:
        raise PriceParseError(raw, "not positive")
    return value


def try_parse_price(raw: str | None, decimal_separator: str = ".") -> Decimal | None:
    """Parse a price, returning None instead of raising."""
    try:
        return parse_price(raw, decimal_separator)
    except PriceParseError:
        return None


def format_price(value: Decimal) -> str:
    """Canonical plain-notation rendering that ``parse_price`` accepts back."""
    return format(value, "f")
