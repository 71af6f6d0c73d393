"""ISO 8601 repeating intervals as used by the cost-insights API.

An interval such as ``R2/P30D/2020-09-01`` asks for two repetitions of a
30-day duration ending on 2020-09-01, so that costs can be bucketed into two
periods for comparison.
"""

from __future__ import annotations

import datetime as dt
import re
from enum import StrEnum

from pydantic import BaseModel

from costinsights.exceptions import InvalidIntervalError

DEFAULT_DATE_FORMAT = "%Y-%m-%d"

_INTERVAL_RE = re.compile(
    r"^R(?P<repeats>\d+)/(?P<duration>P\d+[DM])/(?P<date>\d{4}-\d{2}-\d{2})$"
)


class Duration(StrEnum):
    P7D = "P7D"
    P30D = "P30D"
    P90D = "P90D"
    P3M = "P3M"


_DAYS = {
    Duration.P7D: 7,
    Duration.P30D: 30,
    Duration.P90D: 90,
}


class Interval(BaseModel):
    duration: Duration
    end_date: dt.date
    repeats: int = 2

    @property
    def end(self) -> str:
        return self.end_date.strftime(DEFAULT_DATE_FORMAT)


def parse_intervals(intervals: str) -> Interval:
    """Parse ``R<n>/<duration>/<YYYY-MM-DD>`` into an :class:`Interval`."""
    match = _INTERVAL_RE.match(intervals.strip())
    if match is None:
        raise InvalidIntervalError(
            f"Invalid intervals '{intervals}', expected R<n>/<duration>/<YYYY-MM-DD>"
        )
    try:
        duration = Duration(match["duration"])
    except ValueError:
        raise InvalidIntervalError(
            f"Unsupported duration '{match['duration']}'",
            extra={"supported": [d.value for d in Duration]},
        ) from None
    try:
        end_date = dt.datetime.strptime(match["date"], DEFAULT_DATE_FORMAT).date()
    except ValueError:
        raise InvalidIntervalError(f"Invalid end date '{match['date']}'") from None
    return Interval(duration=duration, end_date=end_date, repeats=int(match["repeats"]))


def _subtract_months(day: dt.date, months: int) -> dt.date:
    index = day.year * 12 + (day.month - 1) - months
    return day.replace(year=index // 12, month=index % 12 + 1)


def inclusive_start_date_of(duration: Duration, inclusive_end_date: dt.date) -> dt.date:
    """Start of the two back-to-back periods ending at ``inclusive_end_date``."""
    if duration == Duration.P3M:
        quarter_start = inclusive_end_date.replace(
            month=3 * ((inclusive_end_date.month - 1) // 3) + 1,
            day=1,
        )
        return _subtract_months(quarter_start, 6)
    return inclusive_end_date - dt.timedelta(days=2 * _DAYS[duration])
