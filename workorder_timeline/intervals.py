"""Calendar interval arithmetic for the Day, Week and Month scales.

All functions are pure and operate on naive local :class:`datetime` values.
Plain :class:`date` inputs are promoted to midnight. Weeks start on Sunday.
Results that would fall outside ``datetime.min``..``datetime.max`` are clamped
to that bound, so every function is total over representable inputs.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, date, datetime, time, timedelta
from typing import List

from .models import TimeScale

__all__ = [
    "Interval",
    "as_datetime",
    "ceil",
    "floor",
    "interval_for",
    "offset",
    "range_",
    "round_",
]


def as_datetime(value: date | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def floor(value: date | datetime, scale: TimeScale) -> datetime:
    """Return the largest grid boundary at or before ``value``."""

    moment = as_datetime(value)
    day_start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    if scale is TimeScale.DAY:
        return day_start
    if scale is TimeScale.WEEK:
        # Monday is weekday 0; step back to the preceding Sunday.
        back = (day_start.weekday() + 1) % 7
        if day_start - datetime.min < timedelta(days=back):
            return datetime.min
        return day_start - timedelta(days=back)
    return day_start.replace(day=1)


def offset(value: date | datetime, count: int, scale: TimeScale) -> datetime:
    """Shift ``value`` by ``count`` whole units of ``scale``."""

    moment = as_datetime(value)
    bound = datetime.max if count > 0 else datetime.min
    if scale is not TimeScale.MONTH:
        try:
            return moment + timedelta(days=count * (7 if scale is TimeScale.WEEK else 1))
        except OverflowError:
            return bound

    month_index = moment.month - 1 + count
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    if not MINYEAR <= year <= MAXYEAR:
        return bound
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def ceil(value: date | datetime, scale: TimeScale) -> datetime:
    """Return the smallest grid boundary at or after ``value``."""

    floored = floor(value, scale)
    if floored == as_datetime(value):
        return floored
    return offset(floored, 1, scale)


def round_(value: date | datetime, scale: TimeScale) -> datetime:
    """Return the nearest grid boundary; exact midpoints round up."""

    moment = as_datetime(value)
    lower = floor(moment, scale)
    if lower == moment:
        return lower
    upper = offset(lower, 1, scale)
    return lower if moment - lower < upper - moment else upper


def range_(start: date | datetime, end: date | datetime, scale: TimeScale) -> List[datetime]:
    """Every grid boundary in ``[floor(start), end)`` in ascending order."""

    stop = as_datetime(end)
    current = floor(start, scale)
    boundaries: List[datetime] = []
    while current < stop:
        boundaries.append(current)
        current = offset(current, 1, scale)
    return boundaries


@dataclass(frozen=True)
class Interval:
    """The interval functions bound to a single scale."""

    scale: TimeScale

    def floor(self, value: date | datetime) -> datetime:
        return floor(value, self.scale)

    def ceil(self, value: date | datetime) -> datetime:
        return ceil(value, self.scale)

    def round(self, value: date | datetime) -> datetime:
        return round_(value, self.scale)

    def offset(self, value: date | datetime, count: int) -> datetime:
        return offset(value, count, self.scale)

    def range(self, start: date | datetime, end: date | datetime) -> List[datetime]:
        return range_(start, end, self.scale)


_INTERVALS = {scale: Interval(scale) for scale in TimeScale}


def interval_for(scale: TimeScale | str) -> Interval:
    return _INTERVALS[TimeScale.parse(scale)]
