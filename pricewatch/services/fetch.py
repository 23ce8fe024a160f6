"""HTTP retrieval of product pages.

The scraping core depends on fetching only through the narrow
``FetchGateway`` contract: given a URL, request headers and a timeout,
return a parsed document or raise ``TransportError``. The default gateway
uses a shared aiohttp session and parses pages with BeautifulSoup + lxml.
"""

import asyncio
import logging
from typing import Protocol

import aiohttp
from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from ..errors import TransportError

logger = logging.getLogger(__name__)


class FetchGateway(Protocol):
    """Contract for retrieving and parsing a product page."""

    async def fetch(self, url: str, headers: dict[str, str], timeout: float) -> BeautifulSoup:
        """Fetch ``url`` and return the parsed document.

        Args:
            url: Page to retrieve.
            headers: Request headers, including a browser user agent.
            timeout: Total request timeout in seconds.

        Raises:
            TransportError: On connection failure, timeout or HTTP error status.
        """
        ...


def create_session() -> aiohttp.ClientSession:
    """Create an aiohttp session tuned for scraping.

    Per-request headers and timeouts are supplied by the caller, so the
    session only carries connection limits and transport-level headers.

    Returns:
        aiohttp.ClientSession: Configured HTTP session.
    """
    connector = aiohttp.TCPConnector(limit=100, limit_per_host=10)
    headers = {
        "Accept-Encoding": "gzip, deflate",
        "DNT": "1",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
    }
    return aiohttp.ClientSession(connector=connector, headers=headers)


class AiohttpFetchGateway:
    """FetchGateway backed by an aiohttp session.

    The session is created lazily on first use unless one is injected, and
    is closed by ``close()`` only when the gateway created it.
    """

    def __init__(self, session: aiohttp.ClientSession | None = None, parser: str = "lxml") -> None:
        self._session = session
        self._owns_session = session is None
        self.parser = parser

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = create_session()
        return self._session

    async def fetch(self, url: str, headers: dict[str, str], timeout: float) -> BeautifulSoup:
        session = self._get_session()
        try:
            async with session.get(
                url,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
                allow_redirects=True,
            ) as response:
                if response.status >= 400:
                    raise TransportError(url, f"HTTP {response.status}", status=response.status)
                # BeautifulSoup decodes, falling back when the declared charset is wrong
                content = await response.read()
                charset = response.charset
        except TransportError:
            raise
        except asyncio.TimeoutError as e:
            raise TransportError(url, f"Timed out after {timeout}s", cause=e) from e
        except aiohttp.ClientError as e:
            raise TransportError(url, str(e) or type(e).__name__, cause=e) from e

        logger.debug(f"Fetched {len(content)} bytes from {url} (declared charset: {charset})")
        try:
            return BeautifulSoup(content, self.parser, from_encoding=charset)
        except ParserRejectedMarkup as e:
            raise TransportError(url, "Unreadable page content", cause=e) from e

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "AiohttpFetchGateway":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
