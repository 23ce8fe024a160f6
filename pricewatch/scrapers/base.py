"""Extraction strategy protocol, shared scraper base and site registry.

Defines the interface every site-specific strategy implements, the ordered
selector-fallback machinery they share, and the registry that dispatches a
product URL to the first strategy that supports it.
"""

import json
import logging
from collections.abc import Iterator
from decimal import Decimal
from typing import Any, Protocol
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from ..errors import ScrapeError, ScrapeErrorKind, UnsupportedSiteError
from ..models import Availability, PriceReading, utc_now
from .price_parser import try_parse_price

logger = logging.getLogger(__name__)

UNKNOWN_PRODUCT = "Unknown Product"
UNKNOWN_SITE = "Unknown"

# Price selector source meaning "use the element's text content"
TEXT = "text"


class ExtractionStrategy(Protocol):
    """Interface for all site-specific extraction strategies.

    Methods:
        supports: Check if the strategy can handle a URL, without any I/O.
        get_site_name: Stable human-readable site label.
        extract: Turn a fetched product page into a PriceReading.
    """

    def supports(self, url: str | None) -> bool:
        """Check if this strategy can handle the given URL.

        Args:
            url: Product URL.

        Returns:
            True if the URL belongs to one of the strategy's domains.
        """
        ...

    def get_site_name(self) -> str:
        """Get the site label (e.g., 'Amazon', 'Flipkart')."""
        ...

    def extract(self, document: BeautifulSoup, url: str) -> PriceReading:
        """Extract a price reading from an already-parsed product page.

        Args:
            document: Parsed HTML document.
            url: URL the document was fetched from.

        Returns:
            PriceReading for the page.

        Raises:
            ScrapeError: If no price can be found or the page cannot be read.
        """
        ...


def host_of(url: str) -> str:
    """Lower-cased host of a URL, tolerating a missing scheme."""
    candidate = url.strip().lower()
    if "//" not in candidate:
        candidate = "//" + candidate
    host = urlparse(candidate).hostname or ""
    return host.rstrip(".")


def parse_json_ld_price(soup: BeautifulSoup) -> Decimal | None:
    """Find a schema.org ``offers.price`` in JSON-LD scripts."""
    for script in soup.find_all("script", type="application/ld+json"):
        text = script.string
        if not text:
            continue
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            continue

        for node in _json_ld_nodes(data):
            offers = node.get("offers")
            if isinstance(offers, dict):
                offers = [offers]
            if not isinstance(offers, list):
                continue
            for offer in offers:
                if not isinstance(offer, dict):
                    continue
                price = try_parse_price(str(offer.get("price") or offer.get("lowPrice") or ""))
                if price is not None:
                    return price
    return None


def _json_ld_nodes(data: Any) -> Iterator[dict[str, Any]]:
    if isinstance(data, list):
        for entry in data:
            yield from _json_ld_nodes(entry)
    elif isinstance(data, dict):
        yield data
        graph = data.get("@graph")
        if isinstance(graph, list):
            yield from _json_ld_nodes(graph)


class BaseScraper:
    """Base class implementing ordered selector fallback.

    Subclasses declare their domains and selector lists; order in
    ``PRICE_SELECTORS`` is a reliability ranking, most specific markup first.
    Each price selector is a ``(css, source)`` pair where source is ``"text"``
    or the name of the attribute holding the raw value.
    """

    DOMAINS: tuple[str, ...] = ()
    TITLE_SELECTORS: tuple[str, ...] = ()
    PRICE_SELECTORS: tuple[tuple[str, str], ...] = ()
    DEFAULT_CURRENCY = "USD"
    USE_JSON_LD_FALLBACK = True

    def __init__(self, site_name: str):
        """Initialize base scraper.

        Args:
            site_name: Site label (e.g., 'Amazon', 'Flipkart').
        """
        self.site_name = site_name
        self.logger = logging.getLogger(f"{__name__}.{site_name.lower()}")

    def get_site_name(self) -> str:
        """Get the site label."""
        return self.site_name

    def supports(self, url: str | None) -> bool:
        """Match the URL host against the strategy's domains, case-insensitively."""
        if not url:
            return False
        try:
            host = host_of(url)
        except ValueError:
            return False
        return any(host == domain or host.endswith("." + domain) for domain in self.DOMAINS)

    def extract(self, document: BeautifulSoup, url: str) -> PriceReading:
        """Extract name, price, availability and currency from a product page.

        Args:
            document: Parsed HTML document.
            url: Source URL, attached to any error raised.

        Returns:
            PriceReading captured now.

        Raises:
            ScrapeError: PRICE_NOT_FOUND when every price candidate fails,
                PARSE_ERROR for any other failure while reading the page.
        """
        self._log_scraping_start(url)
        try:
            name = self.extract_title(document)
            price = self.extract_price(document, url)
            availability = self.check_availability(document)
            currency = self.currency_for(url)
        except ScrapeError as e:
            self._log_scraping_error(url, e)
            raise
        except Exception as e:
            self._log_scraping_error(url, e)
            raise ScrapeError(
                ScrapeErrorKind.PARSE_ERROR,
                url,
                message=f"Failed to read {self.site_name} product page",
                cause=e,
            ) from e

        reading = PriceReading(
            name=name,
            price=price,
            availability=availability,
            currency=currency,
            captured_at=utc_now(),
        )
        self._log_scraping_success(url, f"'{name}' - {price} {currency}")
        return reading

    def extract_title(self, document: BeautifulSoup) -> str:
        """First non-empty title selector, then the cleaned page title."""
        for selector in self.TITLE_SELECTORS:
            element = document.select_one(selector)
            if element is None:
                continue
            title = element.get_text(" ", strip=True)
            if title:
                return title

        if document.title is not None:
            title = self.clean_page_title(document.title.get_text(strip=True))
            if title:
                return title

        return UNKNOWN_PRODUCT

    def clean_page_title(self, text: str) -> str:
        """Strip site branding from the page's <title>. Override per site."""
        return text.strip()

    def extract_price(self, document: BeautifulSoup, url: str) -> Decimal:
        """Try price selectors in order; first positive parse wins.

        Raises:
            ScrapeError: PRICE_NOT_FOUND if no candidate yields a price.
        """
        decimal_separator = self.decimal_separator_for(url)
        for selector, source in self.PRICE_SELECTORS:
            element = document.select_one(selector)
            if element is None:
                continue
            # Attribute values are machine-readable and always use "."
            separator = decimal_separator if source == TEXT else "."
            price = try_parse_price(self._candidate_text(element, source), separator)
            if price is not None:
                self.logger.debug(f"Price {price} matched selector {selector!r}")
                return price
            self.logger.debug(f"Selector {selector!r} matched but held no usable price")

        if self.USE_JSON_LD_FALLBACK:
            price = parse_json_ld_price(document)
            if price is not None:
                self.logger.debug(f"Price {price} taken from JSON-LD offers")
                return price

        raise ScrapeError(
            ScrapeErrorKind.PRICE_NOT_FOUND,
            url,
            message=f"Could not extract price from {self.site_name} page",
        )

    def check_availability(self, document: BeautifulSoup) -> Availability:
        """Site-specific stock heuristics. Override per site."""
        return Availability.UNKNOWN

    def currency_for(self, url: str) -> str:
        """Currency of prices on this URL."""
        return self.DEFAULT_CURRENCY

    def decimal_separator_for(self, url: str) -> str:
        """Decimal separator used in visible prices on this URL."""
        return "."

    @staticmethod
    def _candidate_text(element: Tag, source: str) -> str | None:
        if source == TEXT:
            return element.get_text(strip=True)
        value = element.get(source)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def _log_scraping_start(self, url: str) -> None:
        self.logger.info(f"Extracting {self.site_name} product page: {url}")

    def _log_scraping_success(self, url: str, result: str) -> None:
        self.logger.info(f"Successfully extracted from {self.site_name}: {result}")

    def _log_scraping_error(self, url: str, error: Exception) -> None:
        self.logger.error(f"Failed to extract from {self.site_name} ({url}): {error}")


class SiteRegistry:
    """Ordered registry of extraction strategies.

    Dispatch walks strategies in registration order and returns the first
    whose ``supports`` matches, so registration order is the tie-break when
    two strategies could handle the same URL.
    """

    def __init__(self, strategies: list[ExtractionStrategy] | None = None) -> None:
        """Initialize registry.

        Args:
            strategies: Strategies to register, in dispatch order.
        """
        self._strategies: list[ExtractionStrategy] = []
        self.logger = logging.getLogger(f"{__name__}.registry")
        for strategy in strategies or []:
            self.register(strategy)

    def register(self, strategy: ExtractionStrategy) -> None:
        """Append a strategy; duplicates are kept but never win dispatch."""
        self._strategies.append(strategy)
        self.logger.info(f"Registered scraper for site: {strategy.get_site_name()}")

    def find(self, url: str | None) -> ExtractionStrategy | None:
        """First strategy supporting the URL, or None."""
        for strategy in self._strategies:
            if strategy.supports(url):
                return strategy
        return None

    def dispatch(self, url: str) -> ExtractionStrategy:
        """Get the strategy for a URL.

        Raises:
            UnsupportedSiteError: If no registered strategy supports the URL.
        """
        strategy = self.find(url)
        if strategy is None:
            self.logger.warning(f"No scraper found for URL: {url}")
            raise UnsupportedSiteError(url)
        return strategy

    def is_supported(self, url: str | None) -> bool:
        return self.find(url) is not None

    def site_name_for(self, url: str | None) -> str:
        """Site label for a URL, ``"Unknown"`` when unsupported."""
        strategy = self.find(url)
        return strategy.get_site_name() if strategy else UNKNOWN_SITE

    def list_sites(self) -> list[str]:
        """Site labels in registration order."""
        return [strategy.get_site_name() for strategy in self._strategies]

    def __len__(self) -> int:
        return len(self._strategies)

    def __iter__(self) -> Iterator[ExtractionStrategy]:
        return iter(list(self._strategies))
