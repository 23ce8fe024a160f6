"""Flipkart product page extraction.

Flipkart ships obfuscated, frequently rotated class names. Title and price
are tried through the known class variants first, with the schema.org
``meta[itemprop='price']`` content attribute as the last selector.
"""

import re

from bs4 import BeautifulSoup

from ..models import Availability
from .base import TEXT, BaseScraper

NOTIFY_CONTROL = "button._2KpZ6l._2ObVJD"
PURCHASE_CONTROLS = (
    "button._2KpZ6l._2U9uOA._3v1-ww",  # Buy now
    "button._2KpZ6l._2U9uOA.ihZ75k._3AWRsL",  # Add to cart
)
PURCHASE_LABEL_RE = re.compile(r"buy now|add to cart|go to cart", re.I)
OUT_OF_STOCK_RE = re.compile(r"\b(sold out|currently unavailable|out of stock)\b", re.I)
# Text inside these never reaches the shopper
INVISIBLE_TAGS = frozenset({"script", "style", "noscript", "template"})


def _has_visible_text(document: BeautifulSoup, pattern: re.Pattern[str]) -> bool:
    """True if a rendered text node, not embedded script state, matches."""
    for text in document.find_all(string=pattern):
        parent = text.parent
        if parent is not None and parent.name not in INVISIBLE_TAGS:
            return True
    return False


class FlipkartScraper(BaseScraper):
    """Flipkart strategy.

    Availability policy: negative signals win. A "notify me" control or a
    sold-out marker means unavailable. Otherwise a purchase control counts
    only when its label is an actual purchase action; no signal at all
    means unavailable.
    """

    DOMAINS = ("flipkart.com", "fkrt.it")
    TITLE_SELECTORS = (
        "span.B_NuCI",
        "h1.yhB1nd",
        ".G6XhRU",
        "h1._9E25nV",
        "span._35KyD6",
    )
    PRICE_SELECTORS = (
        ("div._30jeq3._16Jk6d", TEXT),
        ("div._30jeq3", TEXT),
        ("div._16Jk6d", TEXT),
        ("span._2I-_Kd._30jeq3", TEXT),
        ("div[class*='_30jeq3']", TEXT),
        ("meta[itemprop='price']", "content"),
    )
    DEFAULT_CURRENCY = "INR"

    def __init__(self) -> None:
        """Initialize Flipkart scraper."""
        super().__init__("Flipkart")

    def clean_page_title(self, text: str) -> str:
        # "Product Name : Buy ... Online at Best Price - Flipkart.com"
        colon_index = text.find(":")
        if colon_index > 0:
            return text[:colon_index].strip()
        return text.replace("- Flipkart.com", "").strip()

    def check_availability(self, document: BeautifulSoup) -> Availability:
        notify = document.select_one(NOTIFY_CONTROL)
        if notify is not None and "notify" in notify.get_text(strip=True).lower():
            return Availability.UNAVAILABLE

        if _has_visible_text(document, OUT_OF_STOCK_RE):
            return Availability.UNAVAILABLE

        for selector in PURCHASE_CONTROLS:
            control = document.select_one(selector)
            if control is None:
                continue
            label = control.get_text(" ", strip=True)
            if PURCHASE_LABEL_RE.search(label):
                return Availability.AVAILABLE
            self.logger.debug(f"Ignoring purchase control with label {label!r}")

        return Availability.UNAVAILABLE


# Create and export Flipkart scraper instance
flipkart_scraper = FlipkartScraper()
