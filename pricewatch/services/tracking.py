"""Price refresh workflow.

Glues the scraping core to persistence and notifications: runs a batch for
the items due on a cadence, stores each successful reading, evaluates alert
rules against the item's stored previous price, and delivers alerts with
at-most-once bookkeeping. An alert is recorded as un-notified before
dispatch and marked notified only after the sink accepts it, so alerts
whose delivery failed are re-sent by ``redeliver_pending`` and never
re-evaluated.
"""

import logging

from pydantic import BaseModel

from ..models import AlertRecord, BatchResult, Cadence, PriceAnalytics, PriceReading, TrackedItem
from .alerts import AlertEvaluator
from .analytics import compute_price_analytics
from .coordinator import ScrapeCoordinator
from .notifications import NotificationSink
from .scheduler import BatchScheduler, due_items
from .storage import TrackingStore

logger = logging.getLogger(__name__)


class RefreshSummary(BaseModel):
    """Outcome of one refresh run.

    Attributes:
        batch: Per-item scrape outcomes.
        alerts_sent: Alerts the sink accepted.
        alerts_failed: Alerts left un-notified for redelivery.
    """

    batch: BatchResult
    alerts_sent: int = 0
    alerts_failed: int = 0


class PriceTrackingService:
    """Refreshes tracked items and delivers the alerts they trigger."""

    def __init__(
        self,
        store: TrackingStore,
        coordinator: ScrapeCoordinator,
        scheduler: BatchScheduler,
        evaluator: AlertEvaluator,
        sink: NotificationSink,
    ) -> None:
        self.store = store
        self.coordinator = coordinator
        self.scheduler = scheduler
        self.evaluator = evaluator
        self.sink = sink

    async def refresh_cadence(self, cadence: Cadence) -> RefreshSummary:
        """Refresh every active item on ``cadence``."""
        logger.info(f"Starting {cadence.value.lower()} price scraping job")
        items = due_items(self.store.list_items(), cadence)
        return await self.refresh_items(items, cadence)

    async def refresh_items(
        self, items: list[TrackedItem], cadence: Cadence | None = None
    ) -> RefreshSummary:
        """Scrape ``items`` and apply every successful reading."""
        batch = await self.scheduler.run_batch(items, cadence)
        summary = RefreshSummary(batch=batch)

        for success in batch.successes():
            sent, failed = await self._apply_reading(success.item_id, success.reading)
            summary.alerts_sent += sent
            summary.alerts_failed += failed

        if summary.alerts_sent or summary.alerts_failed:
            logger.info(
                f"Alerts delivered: {summary.alerts_sent}, pending redelivery: {summary.alerts_failed}"
            )
        return summary

    async def _apply_reading(self, item_id: int, reading: PriceReading) -> tuple[int, int]:
        # Fresh snapshot: the stored last price is the true previous price
        item = self.store.get_item(item_id)
        if item is None:
            logger.warning(f"Item {item_id} disappeared before its reading was saved")
            return 0, 0

        events = self.evaluator.evaluate_reading(item, reading) if item.alert_email else []
        self.store.append_reading(item_id, reading)
        logger.info(f"Updated price for {reading.name}: {item.last_price} -> {reading.price}")

        sent = failed = 0
        for event in events:
            record = self.store.save_alert(event)
            if await self._deliver(record, item):
                sent += 1
            else:
                failed += 1
        return sent, failed

    async def _deliver(self, record: AlertRecord, item: TrackedItem) -> bool:
        try:
            await self.sink.send(record.event, item)
        except Exception as e:
            logger.error(
                f"Failed to send {record.event.kind.value} alert {record.id} "
                f"for item {item.id}: {e}"
            )
            return False
        self.store.mark_notified(record.id)
        return True

    async def redeliver_pending(self) -> int:
        """Re-send alerts whose earlier delivery failed.

        Returns:
            Number of alerts delivered on this pass.
        """
        delivered = 0
        for record in self.store.pending_alerts():
            item = self.store.get_item(record.event.item_id)
            if item is None:
                logger.warning(f"Skipping alert {record.id}: item {record.event.item_id} is gone")
                continue
            if await self._deliver(record, item):
                delivered += 1
        return delivered

    async def scrape_now(self, url: str) -> PriceReading:
        """Manual scrape; typed ScrapeErrors reach the caller unchanged."""
        return await self.coordinator.scrape_one(url)

    def analytics(self, item_id: int, days: int = 30) -> PriceAnalytics:
        """Price analytics for an item over the last ``days`` days."""
        if self.store.get_item(item_id) is None:
            raise KeyError(f"Unknown item {item_id}")
        return compute_price_analytics(item_id, self.store.get_readings(item_id), days)
