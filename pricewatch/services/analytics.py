"""Price history analytics.

Summarizes an item's readings over a recent window: lowest, highest and
average price, change since the first reading, and whether the item is
currently at its lowest price.
"""

from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from ..models import PriceAnalytics, PriceReading, utc_now

CENTS = Decimal("0.01")
RATIO_PRECISION = Decimal("0.0001")


def compute_price_analytics(
    item_id: int,
    readings: list[PriceReading],
    days: int = 30,
    now: datetime | None = None,
) -> PriceAnalytics:
    """Compute analytics over readings captured in the last ``days`` days.

    Args:
        item_id: Item the readings belong to.
        readings: Price history in any order.
        days: Window size in days.
        now: Window end, defaults to the current UTC time.

    Returns:
        PriceAnalytics; price fields are None when the window is empty.
    """
    if days < 1:
        raise ValueError("days must be at least 1")

    window_start = (now or utc_now()) - timedelta(days=days)
    window = sorted(
        (r for r in readings if r.captured_at >= window_start),
        key=lambda r: r.captured_at,
    )
    if not window:
        return PriceAnalytics(item_id=item_id, days_analyzed=days)

    prices = [r.price for r in window]
    min_price = min(prices)
    max_price = max(prices)
    avg_price = (sum(prices, Decimal("0")) / len(prices)).quantize(CENTS, ROUND_HALF_UP)
    first_price = prices[0]
    current_price = prices[-1]
    price_change = current_price - first_price

    percentage_change = None
    if first_price > 0:
        percentage_change = (price_change / first_price).quantize(
            RATIO_PRECISION, ROUND_HALF_UP
        ) * 100

    return PriceAnalytics(
        item_id=item_id,
        min_price=min_price,
        max_price=max_price,
        avg_price=avg_price,
        current_price=current_price,
        price_change=price_change,
        percentage_change=percentage_change,
        record_count=len(window),
        days_analyzed=days,
        is_at_lowest_price=current_price == min_price,
        savings_from_max=max_price - current_price,
    )
