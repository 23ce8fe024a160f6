"""Alert rule evaluation.

Decides which alerts a price transition fires. The evaluator is a pure
function of its input: it keeps no memory between calls, sends nothing and
marks nothing as notified. Edge-triggering for target alerts relies on the
caller supplying the true previous price; delivery bookkeeping belongs to
the caller's durable alert records.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from ..models import AlertDecisionInput, AlertEvent, AlertKind, PriceReading, TrackedItem

logger = logging.getLogger(__name__)

DEFAULT_DROP_THRESHOLD = Decimal("5.0")
RATIO_PRECISION = Decimal("0.0001")


def drop_percentage(previous_price: Decimal | None, new_price: Decimal) -> Decimal | None:
    """Percentage drop from ``previous_price`` to ``new_price``.

    The ratio is rounded half-up to 4 decimal places before scaling to a
    percentage, so 100 → 95 is exactly 5.00. Increases give negative values.

    Returns:
        Drop in percent, None when there is no positive previous price.
    """
    if previous_price is None or previous_price <= 0:
        return None
    ratio = ((previous_price - new_price) / previous_price).quantize(
        RATIO_PRECISION, ROUND_HALF_UP
    )
    return ratio * 100


class AlertEvaluator:
    """Evaluates target-reached and significant-drop rules.

    Rules:
    - TARGET_REACHED: a target is set, the new price is at or below it, and
      the previous price is unknown or was above the target.
    - PRICE_DROP: a positive previous price is known and the drop is at
      least the threshold percent.
    Both may fire for the same transition.
    """

    def __init__(self, drop_threshold_percent: Decimal | float | str = DEFAULT_DROP_THRESHOLD) -> None:
        threshold = Decimal(str(drop_threshold_percent))
        if threshold <= 0:
            raise ValueError("drop threshold must be positive")
        self.drop_threshold = threshold

    def evaluate(
        self,
        decision: AlertDecisionInput,
        item_id: int,
        email: str | None = None,
    ) -> list[AlertEvent]:
        """Alerts fired by one price transition.

        Args:
            decision: Target, previous and new price.
            item_id: Item the transition belongs to.
            email: Recipient copied onto every event.

        Returns:
            Events to deliver, TARGET_REACHED before PRICE_DROP.
        """
        events: list[AlertEvent] = []
        target = decision.target_price
        previous = decision.previous_price
        new_price = decision.new_price

        if target is not None and new_price <= target and (previous is None or previous > target):
            logger.info(f"Target price reached for item {item_id}: {new_price} (target: {target})")
            events.append(
                AlertEvent(
                    item_id=item_id,
                    kind=AlertKind.TARGET_REACHED,
                    trigger_price=new_price,
                    previous_price=previous,
                    target_price=target,
                    email=email,
                )
            )

        percent = drop_percentage(previous, new_price)
        if percent is not None and percent >= self.drop_threshold:
            logger.info(f"Significant price drop for item {item_id}: {previous} -> {new_price} ({percent}% drop)")
            events.append(
                AlertEvent(
                    item_id=item_id,
                    kind=AlertKind.PRICE_DROP,
                    trigger_price=new_price,
                    previous_price=previous,
                    percentage_change=percent,
                    email=email,
                )
            )

        return events

    def evaluate_reading(self, item: TrackedItem, reading: PriceReading) -> list[AlertEvent]:
        """Evaluate a fresh reading against the item snapshot it was taken for."""
        decision = AlertDecisionInput(
            target_price=item.target_price,
            previous_price=item.last_price,
            new_price=reading.price,
        )
        return self.evaluate(decision, item_id=item.id, email=item.alert_email)
