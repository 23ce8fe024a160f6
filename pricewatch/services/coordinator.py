"""Single-item scrape coordination.

Coordinates one scrape: dispatch the URL to its site strategy, fetch the
page through the gateway, and hand the document to the strategy. Performs
no retries; a failure is final for the cycle.
"""

import logging
from datetime import datetime

from ..config import ScraperConfig
from ..errors import ScrapeError, ScrapeErrorKind, TransportError
from ..models import PriceReading, ScrapeFailure, ScrapeOutcome, ScrapeSuccess, TrackedItem
from ..scrapers.base import SiteRegistry
from .fetch import FetchGateway

logger = logging.getLogger(__name__)


class ScrapeCoordinator:
    """Runs dispatch → fetch → extract for one URL.

    Responsibilities:
    - Short-circuit unsupported URLs before any network traffic
    - Fetch with a bounded timeout and browser-like request headers
    - Wrap transport failures as FETCH_FAILED scrape errors
    """

    def __init__(
        self,
        registry: SiteRegistry,
        gateway: FetchGateway,
        scraper_config: ScraperConfig | None = None,
    ) -> None:
        """Initialize coordinator.

        Args:
            registry: Site registry used for dispatch.
            gateway: Page fetcher.
            scraper_config: Timeout and header settings, defaults from env.
        """
        self.registry = registry
        self.gateway = gateway
        self.scraper_config = scraper_config or ScraperConfig()

    async def scrape_one(self, url: str) -> PriceReading:
        """Scrape a product URL.

        Args:
            url: Product page URL.

        Returns:
            Fresh PriceReading.

        Raises:
            UnsupportedSiteError: If no strategy supports the URL (no fetch made).
            ScrapeError: FETCH_FAILED on transport errors, or whatever the
                strategy raised.
        """
        strategy = self.registry.dispatch(url)
        start_time = datetime.now()
        logger.info(f"Scraping {strategy.get_site_name()} item: {url}")

        try:
            document = await self.gateway.fetch(
                url,
                headers=self.scraper_config.request_headers,
                timeout=self.scraper_config.timeout,
            )
        except TransportError as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise ScrapeError(
                ScrapeErrorKind.FETCH_FAILED,
                url,
                message="Failed to fetch product page",
                cause=e,
            ) from e

        reading = strategy.extract(document, url)

        processing_time = int((datetime.now() - start_time).total_seconds() * 1000)
        logger.debug(f"Scraped {url} in {processing_time}ms")
        return reading

    async def scrape_item(self, item: TrackedItem) -> ScrapeOutcome:
        """Scrape a tracked item, converting scrape errors into a failure outcome."""
        try:
            reading = await self.scrape_one(item.url)
        except ScrapeError as e:
            return ScrapeFailure(item_id=item.id, url=item.url, kind=e.kind, detail=e.detail)
        return ScrapeSuccess(item_id=item.id, url=item.url, reading=reading)
