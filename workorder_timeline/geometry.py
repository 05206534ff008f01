"""Per-frame geometry handed to the rendering layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Sequence

from . import intervals
from .models import TimeScale, WorkCenter, WorkOrder


@dataclass(frozen=True)
class ColumnHeader:
    label: str
    date: datetime
    left_percent: float
    width_percent: float
    is_current_period: bool


@dataclass(frozen=True)
class BarGeometry:
    order_id: str
    name: str
    left_fraction: float
    width_fraction: float
    status_class: str
    is_preview: bool = False


@dataclass(frozen=True)
class TimelineRow:
    work_center: WorkCenter
    bars: Sequence[BarGeometry]


@dataclass(frozen=True)
class TimelineFrame:
    """Everything a renderer needs to draw one frame of the timeline."""

    scale: TimeScale
    start: datetime
    end: datetime
    columns: Sequence[ColumnHeader]
    rows: Sequence[TimelineRow]
    cursor_fraction: Optional[float]
    period_label: str
    period_caption: str
    active_orders: Sequence[WorkOrder] = field(default_factory=tuple)


def column_label(moment: datetime, scale: TimeScale) -> str:
    if scale is TimeScale.DAY:
        return moment.strftime("%b %d")
    if scale is TimeScale.WEEK:
        week_end = intervals.offset(moment, 6, TimeScale.DAY)
        return f"{moment:%b %d} – {week_end:%b %d}"
    return moment.strftime("%b %Y")


def is_current_period(column_start: datetime, reference: datetime, scale: TimeScale) -> bool:
    return intervals.floor(column_start, scale) == intervals.floor(reference, scale)


def build_columns(
    scale: TimeScale,
    start: datetime,
    end: datetime,
    reference: datetime,
) -> List[ColumnHeader]:
    """Grid columns covering ``[start, end)`` clipped to the window.

    ``reference`` marks which column is the current period (the cursor, or the
    current time when there is no cursor).
    """

    total = end - start
    if total <= timedelta(0):
        return []

    columns: List[ColumnHeader] = []
    for tick in intervals.range_(start, intervals.ceil(end, scale), scale):
        column_end = intervals.offset(tick, 1, scale)
        render_start = max(start, tick)
        render_end = min(end, column_end)
        width = (render_end - render_start) / total * 100
        if width <= 0:
            continue
        columns.append(
            ColumnHeader(
                label=column_label(tick, scale),
                date=tick,
                left_percent=(render_start - start) / total * 100,
                width_percent=width,
                is_current_period=is_current_period(tick, reference, scale),
            )
        )
    return columns


def bar_geometry(order: WorkOrder, start: datetime, end: datetime, *, is_preview: bool = False) -> BarGeometry:
    total = end - start
    order_start = intervals.as_datetime(order.start)
    order_end = intervals.as_datetime(order.end)
    if total <= timedelta(0):
        left = width = 0.0
    else:
        left = (order_start - start) / total
        width = (order_end - order_start) / total
    return BarGeometry(
        order_id=order.id,
        name=order.name,
        left_fraction=left,
        width_fraction=width,
        status_class=order.status.bar_class,
        is_preview=is_preview,
    )


def visible_bars(
    orders: Iterable[WorkOrder],
    start: datetime,
    end: datetime,
    *,
    preview_id: Optional[str] = None,
) -> List[BarGeometry]:
    """Bars for the orders intersecting the window; others are not emitted."""

    bars: List[BarGeometry] = []
    for order in orders:
        if intervals.as_datetime(order.start) >= end or intervals.as_datetime(order.end) <= start:
            continue
        bars.append(bar_geometry(order, start, end, is_preview=order.id == preview_id))
    return bars


def cursor_fraction(cursor: Optional[datetime], start: datetime, end: datetime) -> Optional[float]:
    if cursor is None:
        return None
    total = end - start
    if total <= timedelta(0):
        return 0.0
    return (cursor - start) / total
