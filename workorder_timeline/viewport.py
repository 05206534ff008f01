"""Visible time window of the timeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from . import intervals
from .models import TimeScale, WorkOrder

LOGGER = logging.getLogger(__name__)

FIT_PADDING = timedelta(days=7)
MIN_FIT_SPAN = timedelta(days=30)
LEFT_EXPANSION_MARGIN = timedelta(days=7)

# Units on either side of the anchor when centering, per scale.
CENTER_HALF_SPAN = {
    TimeScale.DAY: 10,
    TimeScale.WEEK: 5,
    TimeScale.MONTH: 6,
}


@dataclass(frozen=True)
class ViewportState:
    start: datetime
    end: datetime
    scale: TimeScale

    @property
    def span(self) -> timedelta:
        return self.end - self.start


def data_floor(orders: Iterable[WorkOrder], now: datetime) -> datetime:
    """Earliest instant the window may grow back to: first order start minus a week."""

    starts = [intervals.as_datetime(order.start) for order in orders]
    earliest = min(starts) if starts else now
    return earliest - LEFT_EXPANSION_MARGIN


class ViewportController:
    """Owns ``[start, end)`` and the active scale.

    ``start < end`` holds after every operation; requests that would break it
    are dropped and logged instead of raising.
    """

    def __init__(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        scale: TimeScale = TimeScale.DAY,
        *,
        now_provider: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.now_provider = now_provider
        self._scale = TimeScale.parse(scale)
        if start is None or end is None or start >= end:
            start, end = self._centered_window(self.now_provider(), self._scale)
        self._start = start
        self._end = end

    # ------------------------------------------------------------------
    @property
    def start(self) -> datetime:
        return self._start

    @property
    def end(self) -> datetime:
        return self._end

    @property
    def scale(self) -> TimeScale:
        return self._scale

    @property
    def span(self) -> timedelta:
        return self._end - self._start

    @property
    def state(self) -> ViewportState:
        return ViewportState(self._start, self._end, self._scale)

    def restore(self, state: ViewportState) -> None:
        self._scale = state.scale
        self._set(state.start, state.end)

    def fraction_of(self, instant: datetime) -> float:
        return (instant - self._start) / self.span

    def time_at_fraction(self, fraction: float) -> datetime:
        return self._start + self.span * fraction

    def pixel_to_time_ratio(self, track_width: float) -> timedelta:
        """Time covered by one pixel when the window is ``track_width`` wide."""

        if track_width <= 0:
            return timedelta(0)
        return self.span / track_width

    # ------------------------------------------------------------------
    # Window operations
    # ------------------------------------------------------------------
    def fit_to_data(self, orders: Iterable[WorkOrder]) -> None:
        """Cover every order, starting one scale unit before the earliest one.

        With no orders the fit is computed around the current time instead.
        """

        orders = list(orders)
        if orders:
            earliest = min(intervals.as_datetime(order.start) for order in orders)
            latest = max(intervals.as_datetime(order.end) for order in orders)
        else:
            earliest = latest = self.now_provider()

        start = intervals.offset(intervals.floor(earliest, self._scale), -1, self._scale)
        span = max(latest - start + FIT_PADDING, MIN_FIT_SPAN)
        self._set(start, start + span)

    def center_on(self, moment: datetime) -> None:
        start, end = self._centered_window(moment, self._scale)
        self._set(start, end)

    def pan(self, delta_pixels: float, pixel_to_time_ratio: timedelta) -> None:
        """Move the window by ``delta_pixels``; dragging right reveals earlier time."""

        shift = pixel_to_time_ratio * delta_pixels
        self._set(self._start - shift, self._end - shift)

    def expand_right(self, amount: timedelta) -> None:
        if amount <= timedelta(0):
            return
        self._set(self._start, self._end + amount)

    def expand_left(self, amount: timedelta, floor: datetime) -> bool:
        """Grow the window to the left without crossing ``floor``.

        Returns ``True`` when the start actually moved.
        """

        if amount <= timedelta(0) or self._start <= floor + timedelta(seconds=1):
            return False
        new_start = max(floor, self._start - amount)
        if new_start >= self._start:
            return False
        self._set(new_start, self._end)
        return True

    def zoom(self, scale: TimeScale | str, anchor: Optional[datetime] = None) -> None:
        """Switch to ``scale`` and re-center on ``anchor`` (or now)."""

        self._scale = TimeScale.parse(scale)
        self.center_on(anchor if anchor is not None else self.now_provider())

    # ------------------------------------------------------------------
    @staticmethod
    def _centered_window(moment: datetime, scale: TimeScale) -> tuple[datetime, datetime]:
        units = CENTER_HALF_SPAN[scale]
        start = intervals.floor(intervals.offset(moment, -units, scale), scale)
        end = intervals.ceil(intervals.offset(moment, units, scale), scale)
        return start, end

    def _set(self, start: datetime, end: datetime) -> None:
        if start >= end:
            LOGGER.debug("Ignoring viewport update that collapses the window: %s..%s", start, end)
            return
        self._start = start
        self._end = end
