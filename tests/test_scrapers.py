"""Tests for the Amazon and Flipkart extraction strategies.

Covers:
- URL support checks, including short links and scheme-less URLs
- Ordered price selector fallback and the JSON-LD last resort
- Title fallbacks and the unknown-product placeholder
- Per-site availability policies and currency detection
"""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from conftest import AMAZON_URL, FLIPKART_URL, amazon_page, flipkart_page, soup
from pricewatch.errors import ScrapeError, ScrapeErrorKind
from pricewatch.models import Availability
from pricewatch.scrapers.amazon import AmazonScraper
from pricewatch.scrapers.base import UNKNOWN_PRODUCT
from pricewatch.scrapers.flipkart import FlipkartScraper


@pytest.fixture
def amazon():
    return AmazonScraper()


@pytest.fixture
def flipkart():
    return FlipkartScraper()


class TestSupports:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.amazon.in/dp/B0BSHF7WHW",
            "https://WWW.AMAZON.COM/dp/B0BSHF7WHW",
            "https://amzn.to/3xYzAbC",
            "https://amzn.in/d/abc",
            "https://www.amazon.co.uk/dp/B0BSHF7WHW",
            "amazon.in/dp/B0BSHF7WHW",
        ],
    )
    def test_amazon_urls(self, amazon, url):
        assert amazon.supports(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.flipkart.com/item/p/itm123",
            "https://dl.flipkart.com/s/abc",
            "https://fkrt.it/abc123",
        ],
    )
    def test_flipkart_urls(self, flipkart, url):
        assert flipkart.supports(url) is True

    @pytest.mark.parametrize(
        "url",
        [
            None,
            "",
            "https://notamazon.com/dp/B0",
            "https://amazon.in.evil.example/dp/B0",
            "https://www.flipkart.com/item/p/itm123",
        ],
    )
    def test_amazon_rejects(self, amazon, url):
        assert amazon.supports(url) is False

    def test_flipkart_rejects_amazon(self, flipkart):
        assert flipkart.supports(AMAZON_URL) is False

    def test_site_names(self, amazon, flipkart):
        assert amazon.get_site_name() == "Amazon"
        assert flipkart.get_site_name() == "Flipkart"


class TestAmazonExtraction:
    def test_extracts_full_reading(self, amazon):
        reading = amazon.extract(soup(amazon_page()), AMAZON_URL)

        assert reading.name == "Echo Dot (5th Gen)"
        assert reading.price == Decimal("4499")
        assert reading.currency == "INR"
        assert reading.availability is Availability.AVAILABLE
        assert reading.captured_at.tzinfo is not None

    def test_whole_price_selector_wins(self, amazon):
        html = """
        <span id="productTitle">Kindle</span>
        <span class="a-price-whole">1,299.</span>
        <span id="priceblock_ourprice">$999.00</span>
        """
        assert amazon.extract(soup(html), AMAZON_URL).price == Decimal("1299")

    def test_falls_back_to_later_selector(self, amazon):
        html = """
        <span id="productTitle">Kindle</span>
        <span id="priceblock_dealprice">$12.50</span>
        <div id="apex_offerDisplay_desktop"><span class="a-offscreen">$99.00</span></div>
        """
        assert amazon.extract(soup(html), AMAZON_URL).price == Decimal("12.50")

    def test_unparseable_candidate_falls_through(self, amazon):
        html = """
        <span id="productTitle">Kindle</span>
        <span class="a-price-whole">See price in cart</span>
        <span id="priceblock_ourprice">$89.99</span>
        """
        assert amazon.extract(soup(html), AMAZON_URL).price == Decimal("89.99")

    def test_json_ld_is_last_resort(self, amazon):
        html = """
        <span id="productTitle">Kindle</span>
        <script type="application/ld+json">
          {"@type": "Product", "offers": {"@type": "Offer", "price": "249.99"}}
        </script>
        """
        assert amazon.extract(soup(html), AMAZON_URL).price == Decimal("249.99")

    def test_selector_beats_json_ld(self, amazon):
        html = """
        <span id="productTitle">Kindle</span>
        <span id="priceblock_ourprice">$79.00</span>
        <script type="application/ld+json">
          {"@type": "Product", "offers": {"price": "249.99"}}
        </script>
        """
        assert amazon.extract(soup(html), AMAZON_URL).price == Decimal("79.00")

    def test_missing_price_raises_price_not_found(self, amazon):
        html = '<span id="productTitle">Kindle</span><span class="a-price-whole"></span>'

        with pytest.raises(ScrapeError) as exc_info:
            amazon.extract(soup(html), AMAZON_URL)

        assert exc_info.value.kind is ScrapeErrorKind.PRICE_NOT_FOUND
        assert exc_info.value.url == AMAZON_URL

    def test_title_falls_back_to_page_title(self, amazon):
        html = """
        <html><head><title>Echo Dot (5th Gen) - Amazon.in</title></head>
        <body><span class="a-price-whole">4,499</span></body></html>
        """
        assert amazon.extract(soup(html), AMAZON_URL).name == "Echo Dot (5th Gen)"

    def test_unknown_product_when_no_title(self, amazon):
        html = '<span class="a-price-whole">4,499</span>'
        assert amazon.extract(soup(html), AMAZON_URL).name == UNKNOWN_PRODUCT

    def test_unexpected_error_becomes_parse_error(self, amazon):
        amazon.check_availability = MagicMock(side_effect=RuntimeError("boom"))

        with pytest.raises(ScrapeError) as exc_info:
            amazon.extract(soup(amazon_page()), AMAZON_URL)

        assert exc_info.value.kind is ScrapeErrorKind.PARSE_ERROR
        assert isinstance(exc_info.value.cause, RuntimeError)

    @pytest.mark.parametrize(
        "url, currency",
        [
            ("https://www.amazon.in/dp/B0", "INR"),
            ("https://amzn.in/d/abc", "INR"),
            ("https://www.amazon.com/dp/B0", "USD"),
            ("https://www.amazon.co.uk/dp/B0", "GBP"),
            ("https://www.amazon.de/dp/B0", "EUR"),
            ("https://www.amazon.ca/dp/B0", "CAD"),
        ],
    )
    def test_currency_follows_domain(self, amazon, url, currency):
        assert amazon.currency_for(url) == currency

    @pytest.mark.parametrize(
        "price, expected",
        [
            ("1.299,00 €", Decimal("1299.00")),
            ("29,99 €", Decimal("29.99")),
            ("EUR 5,49", Decimal("5.49")),
        ],
    )
    def test_comma_decimal_prices_on_amazon_de(self, amazon, price, expected):
        html = f'<span id="productTitle">Kindle</span><span class="a-offscreen">{price}</span>'

        reading = amazon.extract(soup(html), "https://www.amazon.de/dp/B0")

        assert reading.price == expected
        assert reading.currency == "EUR"

    def test_dot_decimal_prices_elsewhere(self, amazon):
        html = '<span id="productTitle">Kindle</span><span class="a-offscreen">£1,299.00</span>'
        assert amazon.extract(soup(html), "https://www.amazon.co.uk/dp/B0").price == Decimal("1299.00")


class TestAmazonAvailability:
    def test_in_stock_message(self, amazon):
        assert amazon.check_availability(soup(amazon_page())) is Availability.AVAILABLE

    @pytest.mark.parametrize(
        "message",
        [
            "Currently unavailable.",
            "Currently unavailable. We don't know when or if this item will be back in stock.",
            "Temporarily out of stock. Order now and we'll deliver when available.",
        ],
    )
    def test_unavailable_message(self, amazon, message):
        html = amazon_page(availability=message)
        assert amazon.check_availability(soup(html)) is Availability.UNAVAILABLE

    def test_low_stock_message_is_available(self, amazon):
        html = amazon_page(availability="Only 3 left in stock - order soon.")
        assert amazon.check_availability(soup(html)) is Availability.AVAILABLE

    def test_purchase_button_without_message(self, amazon):
        html = '<input id="buy-now-button" type="submit">'
        assert amazon.check_availability(soup(html)) is Availability.AVAILABLE

    def test_no_signal_is_unavailable(self, amazon):
        html = '<span id="productTitle">Kindle</span>'
        assert amazon.check_availability(soup(html)) is Availability.UNAVAILABLE


class TestFlipkartExtraction:
    def test_extracts_full_reading(self, flipkart):
        reading = flipkart.extract(soup(flipkart_page()), FLIPKART_URL)

        assert reading.name == "Apple iPhone 15 (Blue, 128 GB)"
        assert reading.price == Decimal("65999")
        assert reading.currency == "INR"
        assert reading.availability is Availability.AVAILABLE

    def test_meta_price_content_is_last_selector(self, flipkart):
        html = """
        <span class="B_NuCI">Boat Airdopes 141</span>
        <meta itemprop="price" content="1299.00">
        """
        assert flipkart.extract(soup(html), FLIPKART_URL).price == Decimal("1299.00")

    def test_partial_class_match(self, flipkart):
        html = """
        <span class="B_NuCI">Boat Airdopes 141</span>
        <div class="x_30jeq3y">₹1,099</div>
        <meta itemprop="price" content="1299.00">
        """
        assert flipkart.extract(soup(html), FLIPKART_URL).price == Decimal("1099")

    def test_title_selector_order(self, flipkart):
        html = """
        <span class="_35KyD6">Old Title</span>
        <h1 class="yhB1nd">New Title</h1>
        <div class="_30jeq3">₹499</div>
        """
        assert flipkart.extract(soup(html), FLIPKART_URL).name == "New Title"

    def test_page_title_cut_at_colon(self, flipkart):
        html = """
        <html><head><title>Boat Airdopes 141 : Buy Online - Flipkart.com</title></head>
        <body><div class="_30jeq3">₹1,099</div></body></html>
        """
        assert flipkart.extract(soup(html), FLIPKART_URL).name == "Boat Airdopes 141"

    def test_page_title_branding_removed(self, flipkart):
        assert flipkart.clean_page_title("Boat Airdopes 141 - Flipkart.com") == "Boat Airdopes 141"

    def test_missing_price_raises_price_not_found(self, flipkart):
        html = '<span class="B_NuCI">Boat Airdopes 141</span>'

        with pytest.raises(ScrapeError) as exc_info:
            flipkart.extract(soup(html), FLIPKART_URL)

        assert exc_info.value.kind is ScrapeErrorKind.PRICE_NOT_FOUND
        assert exc_info.value.url == FLIPKART_URL


class TestFlipkartAvailability:
    def test_buy_now_is_available(self, flipkart):
        assert flipkart.check_availability(soup(flipkart_page())) is Availability.AVAILABLE

    def test_add_to_cart_is_available(self, flipkart):
        html = '<button class="_2KpZ6l _2U9uOA ihZ75k _3AWRsL">ADD TO CART</button>'
        assert flipkart.check_availability(soup(html)) is Availability.AVAILABLE

    def test_notify_me_is_unavailable(self, flipkart):
        html = flipkart_page(button='<button class="_2KpZ6l _2ObVJD">NOTIFY ME</button>')
        assert flipkart.check_availability(soup(html)) is Availability.UNAVAILABLE

    def test_sold_out_overrides_purchase_control(self, flipkart):
        html = flipkart_page(
            button='<div>Sold Out</div><button class="_2KpZ6l _2U9uOA _3v1-ww">BUY NOW</button>'
        )
        assert flipkart.check_availability(soup(html)) is Availability.UNAVAILABLE

    def test_purchase_class_with_other_label_is_ignored(self, flipkart):
        html = '<button class="_2KpZ6l _2U9uOA _3v1-ww">NOTIFY ME</button>'
        assert flipkart.check_availability(soup(html)) is Availability.UNAVAILABLE

    def test_no_signal_is_unavailable(self, flipkart):
        html = '<span class="B_NuCI">Boat Airdopes 141</span>'
        assert flipkart.check_availability(soup(html)) is Availability.UNAVAILABLE

    def test_sold_out_inside_script_state_is_ignored(self, flipkart):
        html = flipkart_page(
            button=(
                '<script>window.__INITIAL_STATE__ = {"variants": [{"status": "Sold Out"}]};</script>'
                '<button class="_2KpZ6l _2U9uOA _3v1-ww">BUY NOW</button>'
            )
        )
        assert flipkart.check_availability(soup(html)) is Availability.AVAILABLE
