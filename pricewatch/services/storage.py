"""Persistence boundary for tracked items, readings and alert records.

Durable storage is provided by the host application; the tracking workflow
only talks to the store protocols below. ``InMemoryStore`` implements all
of them and backs tests, the CLI and single-process deployments that do not
need history to survive a restart.
"""

import logging
from datetime import datetime
from itertools import count
from typing import Protocol

from ..models import AlertEvent, AlertRecord, PriceReading, TrackedItem, utc_now

logger = logging.getLogger(__name__)


class ItemStore(Protocol):
    """Read access to tracked item snapshots."""

    def get_item(self, item_id: int) -> TrackedItem | None: ...

    def list_items(self) -> list[TrackedItem]: ...


class ReadingStore(Protocol):
    """Append-only price history."""

    def append_reading(self, item_id: int, reading: PriceReading) -> None:
        """Record a reading and make its price the item's last known price."""
        ...

    def get_readings(self, item_id: int, since: datetime | None = None) -> list[PriceReading]:
        """Readings for an item, oldest first."""
        ...


class AlertStore(Protocol):
    """Alert records with delivery state."""

    def save_alert(self, event: AlertEvent) -> AlertRecord: ...

    def mark_notified(self, alert_id: int) -> AlertRecord: ...

    def pending_alerts(self) -> list[AlertRecord]: ...

    def alerts_for_item(self, item_id: int) -> list[AlertRecord]: ...


class TrackingStore(ItemStore, ReadingStore, AlertStore, Protocol):
    """Everything the price tracking workflow persists."""


class InMemoryStore:
    """Dict-backed implementation of every store protocol."""

    def __init__(self, items: list[TrackedItem] | None = None) -> None:
        self._items: dict[int, TrackedItem] = {}
        self._readings: dict[int, list[PriceReading]] = {}
        self._alerts: dict[int, AlertRecord] = {}
        self._alert_ids = count(1)
        for item in items or []:
            self.add_item(item)

    def add_item(self, item: TrackedItem) -> TrackedItem:
        if item.id in self._items:
            raise ValueError(f"Item {item.id} is already tracked")
        self._items[item.id] = item
        return item

    def get_item(self, item_id: int) -> TrackedItem | None:
        return self._items.get(item_id)

    def list_items(self) -> list[TrackedItem]:
        return list(self._items.values())

    def append_reading(self, item_id: int, reading: PriceReading) -> None:
        item = self._items.get(item_id)
        if item is None:
            raise KeyError(f"Unknown item {item_id}")
        self._readings.setdefault(item_id, []).append(reading)
        self._items[item_id] = item.model_copy(
            update={"last_price": reading.price, "name": reading.name}
        )
        logger.debug(f"Saved price {reading.price} for item {item_id}")

    def get_readings(self, item_id: int, since: datetime | None = None) -> list[PriceReading]:
        readings = sorted(self._readings.get(item_id, []), key=lambda r: r.captured_at)
        if since is not None:
            readings = [r for r in readings if r.captured_at >= since]
        return readings

    def save_alert(self, event: AlertEvent) -> AlertRecord:
        record = AlertRecord(id=next(self._alert_ids), event=event)
        self._alerts[record.id] = record
        return record

    def mark_notified(self, alert_id: int) -> AlertRecord:
        record = self._alerts[alert_id]
        updated = record.model_copy(update={"notified": True, "notified_at": utc_now()})
        self._alerts[alert_id] = updated
        return updated

    def pending_alerts(self) -> list[AlertRecord]:
        return [record for record in self._alerts.values() if not record.notified]

    def alerts_for_item(self, item_id: int) -> list[AlertRecord]:
        records = [r for r in self._alerts.values() if r.event.item_id == item_id]
        return sorted(records, key=lambda r: r.triggered_at, reverse=True)
