"""Read-only queries derived from the cursor position."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from . import intervals
from .models import TimeScale, WorkOrder

__all__ = [
    "Cursor",
    "active_orders",
    "current_period_bounds",
    "current_period_caption",
    "period_label",
]

_CAPTIONS = {
    TimeScale.DAY: "Current day",
    TimeScale.WEEK: "Current week",
    TimeScale.MONTH: "Current month",
}


def current_period_bounds(cursor: datetime, scale: TimeScale) -> Tuple[datetime, datetime]:
    """The ``[start, end)`` interval of ``scale`` that contains ``cursor``."""

    start = intervals.floor(cursor, scale)
    return start, intervals.offset(start, 1, scale)


def period_label(cursor: Optional[datetime], scale: TimeScale) -> str:
    if cursor is None:
        return ""
    start, _ = current_period_bounds(cursor, scale)
    if scale is TimeScale.DAY:
        return start.strftime("%B %d, %Y")
    if scale is TimeScale.WEEK:
        saturday = intervals.offset(start, 6, TimeScale.DAY)
        return f"Week of {start:%b %d} - {saturday:%b %d, %Y}"
    return start.strftime("%B %Y")


def current_period_caption(scale: TimeScale) -> str:
    return _CAPTIONS[scale]


def active_orders(
    cursor: Optional[datetime],
    orders: Iterable[WorkOrder],
    scale: TimeScale,
) -> List[WorkOrder]:
    """Orders overlapping the cursor's period, latest start first."""

    if cursor is None:
        return []
    period_start, period_end = current_period_bounds(cursor, scale)
    matches = [
        order
        for order in orders
        if intervals.as_datetime(order.start) < period_end
        and intervals.as_datetime(order.end) > period_start
    ]
    # Stable sort keeps store order among orders sharing a start date.
    matches.sort(key=lambda order: order.start, reverse=True)
    return matches


class Cursor:
    """The single instant used for current-period highlighting."""

    def __init__(self, position: Optional[datetime] = None) -> None:
        self.position = position

    def move_to(self, moment: Optional[datetime]) -> None:
        self.position = moment

    def clamp_to(self, start: datetime, end: datetime) -> None:
        if self.position is not None:
            self.position = min(max(self.position, start), end)
