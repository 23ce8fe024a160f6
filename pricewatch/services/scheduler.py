"""Bounded concurrent batch scraping.

Fans a set of tracked items out to the scrape coordinator with a fixed
in-flight limit, isolates every per-item failure, and fans the outcomes
back in as a BatchResult with one outcome per item.
"""

import asyncio
import logging
from collections.abc import Iterable

from ..errors import ScrapeErrorKind
from ..models import BatchResult, Cadence, ScrapeFailure, ScrapeOutcome, TrackedItem, utc_now
from .coordinator import ScrapeCoordinator

logger = logging.getLogger(__name__)


def due_items(items: Iterable[TrackedItem], cadence: Cadence) -> list[TrackedItem]:
    """Active items refreshed on the given cadence."""
    return [item for item in items if item.active and item.cadence == cadence]


class BatchScheduler:
    """Runs the coordinator over many items concurrently.

    The in-flight bound is an ``asyncio.Semaphore``. Pass the same semaphore
    to every scheduler in the process so the bound holds even when hourly and
    daily batches overlap.
    """

    def __init__(
        self,
        coordinator: ScrapeCoordinator,
        max_concurrency: int = 5,
        batch_timeout: float | None = None,
        semaphore: asyncio.Semaphore | None = None,
    ) -> None:
        """Initialize scheduler.

        Args:
            coordinator: Single-item scrape coordinator.
            max_concurrency: In-flight limit when no semaphore is given.
            batch_timeout: Seconds before unfinished scrapes are cancelled.
            semaphore: Shared in-flight limiter.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.coordinator = coordinator
        self.max_concurrency = max_concurrency
        self.batch_timeout = batch_timeout
        self.semaphore = semaphore or asyncio.Semaphore(max_concurrency)

    async def run_batch(
        self, items: Iterable[TrackedItem], cadence: Cadence | None = None
    ) -> BatchResult:
        """Scrape every item and collect one outcome per item.

        Args:
            items: Items due for refresh.
            cadence: Cadence label recorded on the result.

        Returns:
            BatchResult with outcomes in input order. Scrapes still running
            when the batch timeout expires are cancelled and reported as
            CANCELLED failures.
        """
        batch = list(items)
        started_at = utc_now()
        label = cadence.value if cadence else "ad-hoc"

        if not batch:
            logger.info(f"No {label} items to scrape")
            return BatchResult(cadence=cadence, started_at=started_at, finished_at=started_at)

        logger.info(f"Scraping {len(batch)} {label} items (max {self.max_concurrency} in flight)")

        # One slot per item, each written once by its own task
        slots: list[ScrapeOutcome | None] = [None] * len(batch)

        async def run_item(index: int, item: TrackedItem) -> None:
            async with self.semaphore:
                try:
                    outcome = await self.coordinator.scrape_item(item)
                except Exception as e:
                    logger.error(f"Failed to scrape item {item.id} ({item.url}): {e}")
                    outcome = ScrapeFailure(
                        item_id=item.id,
                        url=item.url,
                        kind=ScrapeErrorKind.UNEXPECTED,
                        detail=str(e) or type(e).__name__,
                    )
            slots[index] = outcome

        tasks = [asyncio.create_task(run_item(i, item)) for i, item in enumerate(batch)]
        try:
            _, pending = await asyncio.wait(tasks, timeout=self.batch_timeout)
        except asyncio.CancelledError:
            await self._cancel(tasks)
            raise

        if pending:
            logger.warning(f"{label} batch timed out; cancelling {len(pending)} unfinished scrapes")
            await self._cancel(pending)

        outcomes: list[ScrapeOutcome] = []
        for item, slot in zip(batch, slots):
            if slot is None:
                slot = ScrapeFailure(
                    item_id=item.id,
                    url=item.url,
                    kind=ScrapeErrorKind.CANCELLED,
                    detail="Batch timed out before the scrape finished",
                )
            outcomes.append(slot)

        result = BatchResult(
            outcomes=tuple(outcomes),
            cadence=cadence,
            started_at=started_at,
            finished_at=utc_now(),
        )
        for failure in result.failures():
            logger.error(
                f"Failed to scrape item {failure.item_id} ({failure.url}): "
                f"{failure.kind.value} - {failure.detail}"
            )
        logger.info(
            f"Completed {label} scraping batch in {result.duration_ms}ms. "
            f"Success: {result.succeeded}, Failed: {result.failed}"
        )
        return result

    @staticmethod
    async def _cancel(tasks: Iterable[asyncio.Task[None]]) -> None:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
