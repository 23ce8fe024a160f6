"""Amazon product page extraction.

Amazon reshuffles its price markup often, so several price locations are
tried in reliability order: the visible whole-number price first, legacy
price blocks next, and the generic off-screen price spans last. One
strategy serves every supported Amazon locale; the currency and the decimal
separator follow the domain.
"""

from bs4 import BeautifulSoup

from ..models import Availability
from .base import TEXT, BaseScraper, host_of

# (domain, currency, decimal separator); first matching domain wins
LOCALES: tuple[tuple[str, str, str], ...] = (
    ("amazon.in", "INR", "."),
    ("amzn.in", "INR", "."),
    ("amazon.co.uk", "GBP", "."),
    ("amazon.de", "EUR", ","),
    ("amazon.ca", "CAD", "."),
    ("amazon.com", "USD", "."),
    ("amzn.com", "USD", "."),
    ("amzn.to", "USD", "."),
)

IN_STOCK_MARKERS = ("in stock",)
OUT_OF_STOCK_MARKERS = ("out of stock", "currently unavailable", "unavailable")


class AmazonScraper(BaseScraper):
    """Amazon strategy.

    Availability policy: an explicit ``#availability`` message decides when
    present, with negative wording taking precedence ("Currently
    unavailable ... back in stock" is unavailable). Otherwise a purchase
    button means available and its absence means unavailable.
    """

    DOMAINS = tuple(domain for domain, _, _ in LOCALES)
    TITLE_SELECTORS = ("#productTitle",)
    PRICE_SELECTORS = (
        (".a-price-whole", TEXT),
        ("#priceblock_ourprice", TEXT),
        ("#priceblock_dealprice", TEXT),
        (".a-offscreen", TEXT),
        ("span[data-a-color='price'] .a-offscreen", TEXT),
        ("#corePrice_feature_div .a-offscreen", TEXT),
        (".priceToPay .a-offscreen", TEXT),
        ("#apex_offerDisplay_desktop .a-offscreen", TEXT),
    )
    PURCHASE_CONTROLS = ("#add-to-cart-button", "#buy-now-button")
    DEFAULT_CURRENCY = "USD"

    def __init__(self) -> None:
        """Initialize Amazon scraper."""
        super().__init__("Amazon")

    def clean_page_title(self, text: str) -> str:
        # "Product Name - Amazon.in"
        dash_index = text.rfind("-")
        if dash_index > 0:
            return text[:dash_index].strip()
        return text.strip()

    def check_availability(self, document: BeautifulSoup) -> Availability:
        availability = document.select_one("#availability")
        if availability is not None:
            text = availability.get_text(" ", strip=True).lower()
            if any(marker in text for marker in OUT_OF_STOCK_MARKERS):
                return Availability.UNAVAILABLE
            if any(marker in text for marker in IN_STOCK_MARKERS):
                return Availability.AVAILABLE

        for selector in self.PURCHASE_CONTROLS:
            if document.select_one(selector) is not None:
                return Availability.AVAILABLE
        return Availability.UNAVAILABLE

    def currency_for(self, url: str) -> str:
        locale = self._locale_for(url)
        return locale[1] if locale else self.DEFAULT_CURRENCY

    def decimal_separator_for(self, url: str) -> str:
        locale = self._locale_for(url)
        return locale[2] if locale else "."

    @staticmethod
    def _locale_for(url: str) -> tuple[str, str, str] | None:
        host = host_of(url)
        for locale in LOCALES:
            domain = locale[0]
            if host == domain or host.endswith("." + domain):
                return locale
        return None


# Create and export Amazon scraper instance
amazon_scraper = AmazonScraper()
