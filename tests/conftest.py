"""Shared fixtures for pricewatch tests.

Provides product page HTML builders, an in-process fetch gateway that
serves canned pages without network access, and sample tracked items.
"""

import asyncio
from decimal import Decimal

import pytest
from bs4 import BeautifulSoup

from pricewatch.config import ScraperConfig
from pricewatch.errors import TransportError
from pricewatch.models import Cadence, TrackedItem
from pricewatch.scrapers import build_default_registry
from pricewatch.services.coordinator import ScrapeCoordinator

AMAZON_URL = "https://www.amazon.in/dp/B0BSHF7WHW"
FLIPKART_URL = "https://www.flipkart.com/apple-iphone-15/p/itm6ac6485515ae4"
UNSUPPORTED_URL = "https://unknown-store.example/item"


def amazon_page(
    price: str = "₹4,499",
    title: str = "Echo Dot (5th Gen)",
    availability: str = "In stock",
) -> str:
    return f"""
    <html>
      <head><title>{title} - Amazon.in</title></head>
      <body>
        <span id="productTitle">  {title}  </span>
        <div id="corePrice_feature_div">
          <span class="a-price"><span class="a-offscreen">{price}</span></span>
        </div>
        <div id="availability"><span>{availability}</span></div>
        <input id="add-to-cart-button" type="submit" value="Add to Cart">
      </body>
    </html>
    """


def flipkart_page(
    price: str = "₹65,999",
    title: str = "Apple iPhone 15 (Blue, 128 GB)",
    button: str = '<button class="_2KpZ6l _2U9uOA _3v1-ww">BUY NOW</button>',
) -> str:
    return f"""
    <html>
      <head><title>{title} : Buy Online at Best Price - Flipkart.com</title></head>
      <body>
        <h1 class="yhB1nd"><span class="B_NuCI">{title}</span></h1>
        <div class="_30jeq3 _16Jk6d">{price}</div>
        <ul class="row">{button}</ul>
      </body>
    </html>
    """


def soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


class FakeFetchGateway:
    """FetchGateway serving canned HTML keyed by URL.

    Records every call and the peak number of concurrent fetches.
    """

    def __init__(self, pages=None, errors=None, delays=None, default_delay=0.0):
        self.pages = dict(pages or {})
        self.errors = dict(errors or {})
        self.delays = dict(delays or {})
        self.default_delay = default_delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def fetch(self, url, headers, timeout):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = self.delays.get(url, self.default_delay)
            if delay:
                await asyncio.sleep(delay)
            if url in self.errors:
                raise self.errors[url]
            if url not in self.pages:
                raise TransportError(url, "HTTP 404", status=404)
            return soup(self.pages[url])
        finally:
            self.in_flight -= 1

    async def close(self):
        self.closed = True


@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def scraper_config():
    return ScraperConfig(timeout=15.0)


@pytest.fixture
def gateway():
    return FakeFetchGateway(pages={AMAZON_URL: amazon_page(), FLIPKART_URL: flipkart_page()})


@pytest.fixture
def coordinator(registry, gateway, scraper_config):
    return ScrapeCoordinator(registry, gateway, scraper_config)


def make_item(item_id: int, url: str = AMAZON_URL, **fields) -> TrackedItem:
    fields.setdefault("cadence", Cadence.HOURLY)
    return TrackedItem(id=item_id, url=url, **fields)


@pytest.fixture
def tracked_item():
    return make_item(
        1,
        site="Amazon",
        target_price=Decimal("4000"),
        last_price=Decimal("4999"),
        alert_email="user@example.com",
    )
