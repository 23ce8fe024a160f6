"""Notification sink boundary and the logging sink.

The tracking workflow hands every fired AlertEvent to a NotificationSink.
Actual delivery (email, chat) lives outside this package; the bundled
LoggingNotificationSink renders the message and logs it, which is what a
deployment without a mail transport gets.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from ..messages import (
    PRICE_DROP_BODY,
    PRICE_DROP_SUBJECT,
    TARGET_REACHED_BODY,
    TARGET_REACHED_SUBJECT,
)
from ..models import AlertEvent, AlertKind, TrackedItem

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


class NotificationSink(Protocol):
    """Delivers alert notifications."""

    async def send(self, event: AlertEvent, item: TrackedItem) -> None:
        """Deliver one alert.

        Raises:
            Exception: Any delivery failure; the caller leaves the alert
                un-notified so it can be re-sent.
        """
        ...


def _money(value: Decimal | None) -> str:
    if value is None:
        return "-"
    return str(value.quantize(CENTS, ROUND_HALF_UP))


def render_alert(event: AlertEvent, item: TrackedItem) -> tuple[str, str]:
    """Subject and body for an alert.

    Args:
        event: Alert to describe.
        item: Item snapshot the alert was raised for.

    Returns:
        Tuple of (subject, body).
    """
    name = item.name or item.url
    if event.kind is AlertKind.TARGET_REACHED:
        subject = TARGET_REACHED_SUBJECT.format(name=name)
        body = TARGET_REACHED_BODY.format(
            name=name,
            site=item.site,
            price=_money(event.trigger_price),
            target=_money(event.target_price),
            url=item.url,
        )
        return subject, body

    percent = (event.percentage_change or Decimal("0")).quantize(Decimal("0.1"), ROUND_HALF_UP)
    savings = None
    if event.previous_price is not None:
        savings = event.previous_price - event.trigger_price
    subject = PRICE_DROP_SUBJECT.format(name=name, percent=percent)
    body = PRICE_DROP_BODY.format(
        name=name,
        site=item.site,
        price=_money(event.trigger_price),
        previous=_money(event.previous_price),
        savings=_money(savings),
        percent=percent,
        url=item.url,
    )
    return subject, body


class LoggingNotificationSink:
    """Sink that renders alerts and writes them to the log instead of sending."""

    def __init__(self) -> None:
        self.sent: list[AlertEvent] = []

    async def send(self, event: AlertEvent, item: TrackedItem) -> None:
        subject, body = render_alert(event, item)
        logger.info(f"Notification (simulated) to {event.email}: {subject}")
        logger.debug(f"Notification body:\n{body}")
        self.sent.append(event)
