"""Typed errors raised by the scraping pipeline.

Every failure that leaves a strategy or the coordinator is a ``ScrapeError``
carrying the offending URL, so callers can tell an unsupported site from a
temporary outage or from markup that no longer matches the selectors.
"""

from __future__ import annotations

from enum import Enum


class ScrapeErrorKind(str, Enum):
    """Failure categories for a single scrape attempt."""

    UNSUPPORTED_SITE = "unsupported_site"
    FETCH_FAILED = "fetch_failed"
    PRICE_NOT_FOUND = "price_not_found"
    PARSE_ERROR = "parse_error"
    CANCELLED = "cancelled"
    UNEXPECTED = "unexpected"


_PERMANENT_KINDS = frozenset({ScrapeErrorKind.UNSUPPORTED_SITE})

_USER_MESSAGES: dict[ScrapeErrorKind, str] = {
    ScrapeErrorKind.UNSUPPORTED_SITE: "This site is not supported yet.",
    ScrapeErrorKind.FETCH_FAILED: "The store is temporarily unavailable, try again later.",
    ScrapeErrorKind.PRICE_NOT_FOUND: "Could not find a price on this page.",
    ScrapeErrorKind.PARSE_ERROR: "The product page could not be read, try again later.",
    ScrapeErrorKind.CANCELLED: "The request was cancelled before it finished.",
    ScrapeErrorKind.UNEXPECTED: "Something went wrong while checking the price.",
}


class PriceTrackerError(Exception):
    """Base class for all pricewatch errors."""


class PriceParseError(PriceTrackerError, ValueError):
    """Raised when a raw price string cannot be turned into a positive decimal."""

    def __init__(self, raw: str | None, reason: str = "not a price") -> None:
        self.raw = raw
        self.reason = reason
        super().__init__(f"Cannot parse price from {raw!r}: {reason}")


class ScrapeError(PriceTrackerError):
    """A scrape attempt failed for ``url``.

    Attributes:
        kind: Failure category.
        url: Product URL that was being scraped.
        cause: Underlying exception, if any.
    """

    def __init__(
        self,
        kind: ScrapeErrorKind,
        url: str,
        message: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.url = url
        self.cause = cause
        detail = message or kind.value.replace("_", " ")
        if cause is not None:
            detail = f"{detail}: {cause}"
        self.detail = detail
        super().__init__(f"{detail} (url={url})")

    @property
    def is_transient(self) -> bool:
        """True if retrying on a later cycle may succeed."""
        return self.kind not in _PERMANENT_KINDS

    def user_message(self) -> str:
        """Human-readable explanation for a manual scrape request."""
        return _USER_MESSAGES[self.kind]


class UnsupportedSiteError(ScrapeError):
    """No registered extraction strategy supports the URL."""

    def __init__(self, url: str) -> None:
        super().__init__(
            ScrapeErrorKind.UNSUPPORTED_SITE,
            url,
            message="No scraper available for URL",
        )


class TransportError(PriceTrackerError):
    """HTTP retrieval failed (connection error, timeout or bad status)."""

    def __init__(
        self,
        url: str,
        message: str,
        status: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.url = url
        self.status = status
        self.cause = cause
        super().__init__(message)
