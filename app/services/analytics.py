"""
analytics.py — Rating aggregation core.

Two pure, synchronous functions. Neither performs I/O: the store
(app/services/store.py) fetches and filters rows first, then the route
hands them over here.

USAGE
─────
    from app.services.analytics import aggregate_by_group, summarize_location

    rows = await store.fetch_brand_reviews(brand_id, window)
    cities = aggregate_by_group(rows)
    # [AggregateRow(group_key="Delhi", review_count=2, average_rating=Decimal("4.00")), ...]

    summary = summarize_location(location_id, await store.fetch_location_30d(location_id))
    # no reviews in 30 days → LocationSummary(review_count=0, average_rating=None)

ROUNDING
────────
Averages are computed in Decimal and quantized to 0.01 with ROUND_HALF_EVEN,
so a group rated [2, 2, 2] averages exactly 2.00, and equal inputs always
round the same way.
"""

from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable, Optional

from app.models.stats import AggregateRow, GroupedReview, LocationStatsRow, LocationSummary

UNKNOWN_GROUP = "Unknown"

_CENTS = Decimal("0.01")


def round_average(total: int, count: int) -> Decimal:
    """Mean of `count` ratings summing to `total`, to two decimal places."""
    return (Decimal(total) / Decimal(count)).quantize(_CENTS, rounding=ROUND_HALF_EVEN)


def summarize_location(location_id: str, row: Optional[LocationStatsRow]) -> LocationSummary:
    """
    Normalize the 30-day view lookup for one location.

    No row means no reviews in the window, which is a normal state:
    the summary is {review_count: 0, average_rating: None}, never an error.
    A present row is passed through, with the same defaults applied to
    any sub-field the view left out.
    """
    if row is None:
        return LocationSummary(location_id=location_id, review_count=0, average_rating=None)

    return LocationSummary(
        location_id=location_id,
        review_count=row.reviews_30d if row.reviews_30d is not None else 0,
        average_rating=row.avg_rating_30d,
    )


def aggregate_by_group(
    rows: Iterable[GroupedReview],
    fallback_key: str = UNKNOWN_GROUP,
) -> list[AggregateRow]:
    """
    Group reviews by key in a single pass and average each group.

    Rows with no group key are counted under `fallback_key`, never dropped.
    Only groups that received at least one row are emitted. Output follows
    first-seen order, but callers must not rely on it.
    """
    # key -> [count, sum of ratings]
    groups: dict[str, list[int]] = {}
    for row in rows:
        key = row.group_key if row.group_key is not None else fallback_key
        acc = groups.get(key)
        if acc is None:
            acc = groups[key] = [0, 0]
        acc[0] += 1
        acc[1] += row.rating

    return [
        AggregateRow(group_key=key, review_count=count, average_rating=round_average(total, count))
        for key, (count, total) in groups.items()
    ]
