"""Site-specific extraction strategies.

Contains the price parser, the shared selector-fallback base class, the
site registry used for URL dispatch, and one strategy per supported store.

- ExtractionStrategy: interface every site strategy implements
- SiteRegistry: ordered, first-match-wins URL dispatch
- AmazonScraper / FlipkartScraper: the supported stores
"""

from .amazon import AmazonScraper, amazon_scraper
from .base import BaseScraper, ExtractionStrategy, SiteRegistry
from .flipkart import FlipkartScraper, flipkart_scraper
from .price_parser import format_price, parse_price, try_parse_price


def build_default_registry() -> SiteRegistry:
    """Registry with every supported store, in dispatch order."""
    return SiteRegistry([amazon_scraper, flipkart_scraper])


__all__ = [
    'AmazonScraper',
    'BaseScraper',
    'ExtractionStrategy',
    'FlipkartScraper',
    'SiteRegistry',
    'amazon_scraper',
    'build_default_registry',
    'flipkart_scraper',
    'format_price',
    'parse_price',
    'try_parse_price',
]
