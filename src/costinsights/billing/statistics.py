"""Change and trendline statistics over cost series.

Pure-Python implementations, no numpy dependency.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Sequence

from costinsights.billing.models import ChangeStatistic, DateAggregation, Trendline


def _change(first: float, last: float) -> ChangeStatistic:
    amount = last - first
    # A zero at either end makes the rate of change meaningless.
    if not first or not last:
        return ChangeStatistic(amount=amount)
    return ChangeStatistic(ratio=amount / first, amount=amount)


def change_of(aggregation: Sequence[DateAggregation]) -> ChangeStatistic:
    """Change between the first and last points of a date series."""
    if not aggregation:
        return ChangeStatistic()
    return _change(aggregation[0].amount, aggregation[-1].amount)


def change_of_entity(aggregation: Sequence[float]) -> ChangeStatistic:
    """Change between the before and after buckets of an entity."""
    if len(aggregation) < 2:
        return ChangeStatistic()
    return _change(aggregation[0], aggregation[-1])


def _timestamp(day: dt.date) -> float:
    return dt.datetime(day.year, day.month, day.day, tzinfo=dt.UTC).timestamp()


def trendline_of(aggregation: Sequence[DateAggregation]) -> Trendline:
    """Least-squares line of amount against UNIX time in seconds."""
    if not aggregation:
        return Trendline()
    if len(aggregation) == 1:
        return Trendline(slope=0.0, intercept=aggregation[0].amount)

    xs = [_timestamp(a.date) for a in aggregation]
    ys = [a.amount for a in aggregation]
    n = len(xs)
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n
    sxx = sum((x - mean_x) ** 2 for x in xs)
    if sxx == 0:
        return Trendline(slope=0.0, intercept=mean_y)
    sxy = sum((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys, strict=True))
    slope = sxy / sxx
    return Trendline(slope=slope, intercept=mean_y - slope * mean_x)
