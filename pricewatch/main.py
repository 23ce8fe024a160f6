"""Command-line entry point.

Builds the application container and exposes manual operations: scrape
product URLs now, list supported sites, and check whether a URL is
supported.
"""

import asyncio
import logging
import sys

import click

from .config import config
from .core.container import Container, create_container
from .errors import ScrapeError
from .messages import READING_LINE, SCRAPE_FAILED_LINE, SUPPORTED_LINE, UNSUPPORTED_LINE

logger = logging.getLogger("pricewatch")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        format="%(asctime)s - %(levelname)s - %(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


async def scrape_urls(container: Container, urls: list[str]) -> int:
    """Scrape each URL once and print the reading or the typed error.

    Returns:
        Number of URLs that failed.
    """
    tracking = container.tracking_service()
    gateway = container.fetch_gateway()
    failures = 0
    try:
        for url in urls:
            try:
                reading = await tracking.scrape_now(url)
            except ScrapeError as e:
                failures += 1
                logger.debug(f"Scrape of {url} failed: {e}")
                click.echo(SCRAPE_FAILED_LINE.format(url=url, message=e.user_message()), err=True)
                continue
            click.echo(
                READING_LINE.format(
                    site=container.site_support().site_name_for(url),
                    name=reading.name,
                    price=reading.price,
                    currency=reading.currency,
                    availability=reading.availability.value,
                )
            )
    finally:
        await gateway.close()
    return failures


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Track product prices on supported stores."""
    configure_logging("DEBUG" if verbose else config.app.log_level)
    ctx.ensure_object(dict)
    ctx.obj["container"] = create_container()


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@click.pass_context
def scrape(ctx: click.Context, urls: tuple[str, ...]) -> None:
    """Scrape product URLS now and print the readings."""
    failures = asyncio.run(scrape_urls(ctx.obj["container"], list(urls)))
    if failures:
        sys.exit(1)


@cli.command()
@click.pass_context
def sites(ctx: click.Context) -> None:
    """List supported sites."""
    for site in ctx.obj["container"].site_support().list_supported_sites():
        click.echo(site)


@cli.command()
@click.argument("url")
@click.pass_context
def check(ctx: click.Context, url: str) -> None:
    """Check whether URL belongs to a supported site."""
    site_support = ctx.obj["container"].site_support()
    if site_support.is_url_supported(url):
        click.echo(SUPPORTED_LINE.format(url=url, site=site_support.site_name_for(url)))
    else:
        click.echo(UNSUPPORTED_LINE.format(url=url))
        sys.exit(1)


def main() -> None:
    """Main application entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
