"""Dependency-injection container.

Wires the site registry, fetch gateway, coordinator, scheduler, alert
evaluator, store and notification sink together. The registry is built
explicitly from the known strategies; nothing is discovered at runtime.
"""

import asyncio

from dependency_injector import containers, providers

from pricewatch.config import Config, ScraperConfig
from pricewatch.config import config as default_config
from pricewatch.scrapers import build_default_registry
from pricewatch.services.alerts import AlertEvaluator
from pricewatch.services.coordinator import ScrapeCoordinator
from pricewatch.services.fetch import AiohttpFetchGateway
from pricewatch.services.notifications import LoggingNotificationSink
from pricewatch.services.scheduler import BatchScheduler
from pricewatch.services.site_support import SiteSupportService
from pricewatch.services.storage import InMemoryStore
from pricewatch.services.tracking import PriceTrackingService


class Container(containers.DeclarativeContainer):
    """DI container for the application."""

    config = providers.Configuration()

    # Scraping
    registry = providers.Singleton(build_default_registry)
    fetch_gateway = providers.Singleton(AiohttpFetchGateway)
    scraper_config = providers.Singleton(
        ScraperConfig,
        timeout=config.scraper.timeout,
        user_agent=config.scraper.user_agent,
        accept=config.scraper.accept,
        accept_language=config.scraper.accept_language,
    )
    coordinator = providers.Singleton(
        ScrapeCoordinator,
        registry=registry,
        gateway=fetch_gateway,
        scraper_config=scraper_config,
    )

    # One limiter shared by every cadence
    scrape_semaphore = providers.Singleton(asyncio.Semaphore, config.scheduler.max_concurrency)
    scheduler = providers.Singleton(
        BatchScheduler,
        coordinator=coordinator,
        max_concurrency=config.scheduler.max_concurrency,
        batch_timeout=config.scheduler.batch_timeout,
        semaphore=scrape_semaphore,
    )

    # Alerting
    evaluator = providers.Singleton(
        AlertEvaluator,
        drop_threshold_percent=config.alerts.drop_threshold_percent,
    )
    store = providers.Singleton(InMemoryStore)
    notification_sink = providers.Singleton(LoggingNotificationSink)

    site_support = providers.Singleton(SiteSupportService, registry=registry)
    tracking_service = providers.Singleton(
        PriceTrackingService,
        store=store,
        coordinator=coordinator,
        scheduler=scheduler,
        evaluator=evaluator,
        sink=notification_sink,
    )


def create_container(app_config: Config | None = None) -> Container:
    """Container configured from ``app_config`` (defaults to the global config)."""
    container = Container()
    container.config.from_dict((app_config or default_config).as_dict())
    return container
