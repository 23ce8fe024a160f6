"""Data models for the price tracker.

Defines Pydantic models for every structure that crosses a component
boundary: tracked item snapshots, price readings, per-item scrape outcomes,
batch results, alert events and persisted alert records. Models handed
between components are frozen so a reading can never change after capture.
"""

from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .errors import ScrapeErrorKind


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class Cadence(str, Enum):
    """How often a tracked item is refreshed."""

    HOURLY = "HOURLY"
    DAILY = "DAILY"


class Availability(str, Enum):
    """Tri-state stock status of a product."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class AlertKind(str, Enum):
    """Alert categories emitted by the evaluator."""

    TARGET_REACHED = "TARGET_REACHED"
    PRICE_DROP = "PRICE_DROP"


class TrackedItem(BaseModel):
    """Snapshot of a user-registered product URL.

    Attributes:
        id: Persistent identity of the item.
        url: Canonical product page URL.
        site: Site label as reported by the matching strategy.
        cadence: Refresh schedule.
        target_price: Price at or below which a target alert fires.
        last_price: Most recent known price, None before the first reading.
        alert_email: Where alerts for this item go; no alerts without it.
        name: Product display name from the last reading.
        active: Inactive items are never scheduled.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    url: str
    site: str = "Unknown"
    cadence: Cadence = Cadence.DAILY
    target_price: Decimal | None = None
    last_price: Decimal | None = None
    alert_email: str | None = None
    name: str | None = None
    active: bool = True


class PriceReading(BaseModel):
    """One normalized price observation for a product page."""

    model_config = ConfigDict(frozen=True)

    name: str
    price: Decimal
    availability: Availability = Availability.UNKNOWN
    currency: str
    captured_at: datetime = Field(default_factory=utc_now)


class ScrapeSuccess(BaseModel):
    """Successful outcome for one item in one cycle."""

    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    item_id: int
    url: str
    reading: PriceReading

    @property
    def ok(self) -> bool:
        return True


class ScrapeFailure(BaseModel):
    """Failed outcome for one item in one cycle."""

    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    item_id: int
    url: str
    kind: ScrapeErrorKind
    detail: str

    @property
    def ok(self) -> bool:
        return False


ScrapeOutcome = ScrapeSuccess | ScrapeFailure


class BatchResult(BaseModel):
    """Outcomes of one scheduled run, one per input item in input order.

    Attributes:
        outcomes: Per-item outcomes.
        cadence: Cadence the batch was run for, if any.
        started_at: When the batch started.
        finished_at: When the last outcome was resolved.
    """

    model_config = ConfigDict(frozen=True)

    outcomes: tuple[ScrapeOutcome, ...] = ()
    cadence: Cadence | None = None
    started_at: datetime = Field(default_factory=utc_now)
    finished_at: datetime = Field(default_factory=utc_now)

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.ok)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.succeeded

    @property
    def total(self) -> int:
        return len(self.outcomes)

    def successes(self) -> list[ScrapeSuccess]:
        return [o for o in self.outcomes if isinstance(o, ScrapeSuccess)]

    def failures(self) -> list[ScrapeFailure]:
        return [o for o in self.outcomes if isinstance(o, ScrapeFailure)]

    def outcome_for(self, item_id: int) -> ScrapeOutcome | None:
        for outcome in self.outcomes:
            if outcome.item_id == item_id:
                return outcome
        return None

    @property
    def duration_ms(self) -> int:
        return int((self.finished_at - self.started_at).total_seconds() * 1000)


class AlertDecisionInput(BaseModel):
    """Everything the alert evaluator needs for one price transition.

    Attributes:
        target_price: Configured target, None when the user set no target.
        previous_price: Price before this reading, None on the first reading.
        new_price: Price from the fresh reading.
    """

    model_config = ConfigDict(frozen=True)

    target_price: Decimal | None = None
    previous_price: Decimal | None = None
    new_price: Decimal


class AlertEvent(BaseModel):
    """A notification the caller must deliver at most once."""

    model_config = ConfigDict(frozen=True)

    item_id: int
    kind: AlertKind
    trigger_price: Decimal
    previous_price: Decimal | None = None
    percentage_change: Decimal | None = None
    target_price: Decimal | None = None
    email: str | None = None


class AlertRecord(BaseModel):
    """Persisted alert with its delivery state.

    Attributes:
        id: Store-assigned identity.
        event: The alert that fired.
        triggered_at: When the alert was recorded.
        notified: Whether the notification sink accepted the alert.
        notified_at: When delivery succeeded.
    """

    id: int
    event: AlertEvent
    triggered_at: datetime = Field(default_factory=utc_now)
    notified: bool = False
    notified_at: datetime | None = None


class PriceAnalytics(BaseModel):
    """Summary statistics over an item's price history.

    Attributes:
        item_id: Item the statistics belong to.
        min_price: Lowest observed price.
        max_price: Highest observed price.
        avg_price: Mean price, rounded to cents.
        current_price: Most recent observed price.
        price_change: Current minus first price in the window.
        percentage_change: ``price_change`` relative to the first price.
        record_count: Number of readings in the window.
        days_analyzed: Size of the window in days.
        is_at_lowest_price: Current price equals the minimum.
        savings_from_max: How far the current price sits below the maximum.
    """

    item_id: int
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    avg_price: Decimal | None = None
    current_price: Decimal | None = None
    price_change: Decimal | None = None
    percentage_change: Decimal | None = None
    record_count: int = 0
    days_analyzed: int
    is_at_lowest_price: bool = False
    savings_from_max: Decimal | None = None
