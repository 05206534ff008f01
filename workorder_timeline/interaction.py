"""Pointer-driven state machine for panning, cursor drags and bar edits.

The machine only talks to narrow interfaces: an order source that can look
up, overlap-check and update orders, a viewport that can pan and restore, and
an optional scroller for infinite/auto scroll. Bar drags edit an ephemeral
candidate; the order is written once, when the pointer is released.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Protocol

from . import intervals
from .cursor import Cursor
from .models import TimeScale, WorkOrder, WorkOrderData
from .viewport import ViewportState

LOGGER = logging.getLogger(__name__)

DRAG_THRESHOLD = 5.0
PRIMARY_BUTTON = 0


class InteractionState(str, Enum):
    IDLE = "idle"
    POTENTIAL_CLICK = "potential-click"
    PANNING = "panning"
    CURSOR_DRAGGING = "cursor-dragging"
    BAR_DRAGGING = "bar-dragging"


class DragMode(str, Enum):
    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"


class TargetKind(str, Enum):
    EMPTY_TRACK = "empty-track"
    BAR_BODY = "bar-body"
    BAR_START_HANDLE = "bar-start-handle"
    BAR_END_HANDLE = "bar-end-handle"
    CURSOR_HANDLE = "cursor-handle"
    NONE = "none"


_BAR_MODES = {
    TargetKind.BAR_BODY: DragMode.MOVE,
    TargetKind.BAR_START_HANDLE: DragMode.RESIZE_START,
    TargetKind.BAR_END_HANDLE: DragMode.RESIZE_END,
}


@dataclass(frozen=True)
class HitTarget:
    kind: TargetKind = TargetKind.NONE
    order_id: Optional[str] = None
    work_center_id: Optional[str] = None


@dataclass(frozen=True)
class PointerEvent:
    """A pointer sample; ``x`` is in track pixels from the window's left edge."""

    x: float
    y: float = 0.0
    target: HitTarget = HitTarget()
    button: int = PRIMARY_BUTTON


@dataclass(frozen=True)
class CreateRequest:
    """Emitted when the empty track is clicked without dragging."""

    work_center_id: str
    start: date


class OrderSource(Protocol):
    def get(self, order_id: str) -> Optional[WorkOrder]:
        ...

    def check_overlap(
        self,
        work_center_id: str,
        start: date,
        end: date,
        exclude_id: Optional[str] = None,
    ) -> Optional[WorkOrder]:
        ...

    def update(self, order_id: str, data: WorkOrderData) -> None:
        ...


class PannableViewport(Protocol):
    @property
    def start(self) -> datetime:
        ...

    @property
    def end(self) -> datetime:
        ...

    @property
    def span(self) -> timedelta:
        ...

    @property
    def state(self) -> ViewportState:
        ...

    def pan(self, delta_pixels: float, pixel_to_time_ratio: timedelta) -> None:
        ...

    def restore(self, state: ViewportState) -> None:
        ...


class Scroller(Protocol):
    def check(self) -> Optional[str]:
        ...

    def auto_scroll(self, pointer_x: float) -> int:
        ...

    def stop_auto_scroll(self) -> None:
        ...


@dataclass
class _PointerDown:
    x: float
    y: float
    work_center_id: Optional[str]
    viewport: ViewportState
    last_x: float


@dataclass
class _BarDrag:
    original: WorkOrder
    mode: DragMode
    anchor: datetime
    candidate: WorkOrder


class InteractionMachine:
    """Turns pointer events into viewport, cursor and order changes."""

    def __init__(
        self,
        orders: OrderSource,
        viewport: PannableViewport,
        cursor: Cursor,
        *,
        track_width: Callable[[], float],
        scroller: Optional[Scroller] = None,
        commit: Optional[Callable[[str, WorkOrderData], None]] = None,
        on_change: Optional[Callable[[], None]] = None,
        threshold: float = DRAG_THRESHOLD,
    ) -> None:
        self.orders = orders
        self.viewport = viewport
        self.cursor = cursor
        self.track_width = track_width
        self.scroller = scroller
        self.commit = commit or orders.update
        self.on_change = on_change
        self.threshold = threshold

        self._state = InteractionState.IDLE
        self._down: Optional[_PointerDown] = None
        self._drag: Optional[_BarDrag] = None
        self._cursor_origin: Optional[datetime] = None

    # ------------------------------------------------------------------
    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def drag_mode(self) -> Optional[DragMode]:
        return self._drag.mode if self._drag else None

    @property
    def preview(self) -> Optional[WorkOrder]:
        """The uncommitted candidate of the bar being dragged, if any."""

        return self._drag.candidate if self._drag else None

    def time_at(self, x: float) -> Optional[datetime]:
        width = self.track_width()
        if width <= 0:
            return None
        return self.viewport.start + (self.viewport.span / width) * x

    # ------------------------------------------------------------------
    # Event sinks
    # ------------------------------------------------------------------
    def pointer_down(self, event: PointerEvent) -> None:
        if self._state is not InteractionState.IDLE or event.button != PRIMARY_BUTTON:
            return

        kind = event.target.kind
        if kind is TargetKind.EMPTY_TRACK:
            self._down = _PointerDown(
                x=event.x,
                y=event.y,
                work_center_id=event.target.work_center_id,
                viewport=self.viewport.state,
                last_x=event.x,
            )
            self._transition(InteractionState.POTENTIAL_CLICK)
        elif kind in _BAR_MODES:
            self._begin_bar_drag(event, _BAR_MODES[kind])
        elif kind is TargetKind.CURSOR_HANDLE:
            self._cursor_origin = self.cursor.position
            self._transition(InteractionState.CURSOR_DRAGGING)

    def pointer_move(self, event: PointerEvent) -> None:
        state = self._state
        if state is InteractionState.POTENTIAL_CLICK:
            self._apply_pan(event)
            if self._moved_past_threshold(event):
                self._transition(InteractionState.PANNING)
        elif state is InteractionState.PANNING:
            self._apply_pan(event)
        elif state is InteractionState.CURSOR_DRAGGING:
            # Sampled before auto-scroll, which may grow the window leftwards.
            moment = self.time_at(event.x)
            self._auto_scroll(event.x)
            self._drag_cursor(moment)
        elif state is InteractionState.BAR_DRAGGING:
            moment = self.time_at(event.x)
            self._auto_scroll(event.x)
            self._drag_bar(moment)
            if self.scroller is not None:
                self.scroller.check()

    def pointer_up(self, event: PointerEvent) -> Optional[CreateRequest]:
        state = self._state
        request: Optional[CreateRequest] = None

        if state is InteractionState.POTENTIAL_CLICK:
            if not self._moved_past_threshold(event):
                request = self._create_request(event)
        elif state is InteractionState.BAR_DRAGGING:
            self._commit_drag()

        self._reset()
        if state is not InteractionState.IDLE:
            self._changed()
        return request

    def escape(self) -> None:
        """Abandon the active gesture and undo its uncommitted effects."""

        state = self._state
        if state in (InteractionState.POTENTIAL_CLICK, InteractionState.PANNING) and self._down:
            self.viewport.restore(self._down.viewport)
        elif state is InteractionState.CURSOR_DRAGGING:
            self.cursor.move_to(self._cursor_origin)
        elif state is InteractionState.BAR_DRAGGING and self._drag:
            LOGGER.debug("Discarding drag candidate for %s", self._drag.original.id)
        if state is not InteractionState.IDLE:
            self._reset()
            self._changed()

    # ------------------------------------------------------------------
    # Panning and click detection
    # ------------------------------------------------------------------
    def _apply_pan(self, event: PointerEvent) -> None:
        down = self._down
        if down is None:
            return
        width = self.track_width()
        delta = event.x - down.last_x
        down.last_x = event.x
        if width <= 0 or delta == 0:
            return
        self.viewport.pan(delta, self.viewport.span / width)
        self._changed()

    def _moved_past_threshold(self, event: PointerEvent) -> bool:
        down = self._down
        if down is None:
            return False
        return abs(event.x - down.x) >= self.threshold or abs(event.y - down.y) >= self.threshold

    def _create_request(self, event: PointerEvent) -> Optional[CreateRequest]:
        down = self._down
        moment = self.time_at(event.x)
        if down is None or down.work_center_id is None or moment is None:
            return None
        day = intervals.round_(moment, TimeScale.DAY).date()
        LOGGER.debug("Click on %s at %s", down.work_center_id, day.isoformat())
        return CreateRequest(work_center_id=down.work_center_id, start=day)

    # ------------------------------------------------------------------
    # Cursor drag
    # ------------------------------------------------------------------
    def _drag_cursor(self, moment: Optional[datetime]) -> None:
        if moment is None:
            return
        self.cursor.move_to(min(max(moment, self.viewport.start), self.viewport.end))
        self._changed()

    # ------------------------------------------------------------------
    # Bar drag
    # ------------------------------------------------------------------
    def _begin_bar_drag(self, event: PointerEvent, mode: DragMode) -> None:
        order_id = event.target.order_id
        order = self.orders.get(order_id) if order_id else None
        anchor = self.time_at(event.x)
        if order is None or anchor is None:
            return
        self._drag = _BarDrag(original=order, mode=mode, anchor=anchor, candidate=order)
        self._transition(InteractionState.BAR_DRAGGING)

    def _drag_bar(self, moment: Optional[datetime]) -> None:
        drag = self._drag
        if drag is None or moment is None:
            return

        proposed = self._propose(drag, moment - drag.anchor)
        if proposed is None:
            return
        start, end = proposed
        if (start, end) == (drag.candidate.start, drag.candidate.end):
            return

        original = drag.original
        conflict = self.orders.check_overlap(original.work_center_id, start, end, original.id)
        if conflict is not None:
            LOGGER.debug("Drag frame for %s blocked by %s", original.id, conflict.id)
            return

        drag.candidate = original.with_dates(start, end)
        self._changed()

    @staticmethod
    def _propose(drag: _BarDrag, delta: timedelta) -> Optional[tuple[date, date]]:
        original = drag.original
        origin_start = intervals.as_datetime(original.start)
        origin_end = intervals.as_datetime(original.end)

        if drag.mode is DragMode.MOVE:
            start = intervals.round_(origin_start + delta, TimeScale.DAY).date()
            return start, start + (original.end - original.start)

        if drag.mode is DragMode.RESIZE_START:
            start = intervals.round_(origin_start + delta, TimeScale.DAY).date()
            if start >= original.end:
                return None
            return start, original.end

        end = intervals.round_(origin_end + delta, TimeScale.DAY).date()
        if end <= original.start:
            return None
        return original.start, end

    def _commit_drag(self) -> None:
        drag = self._drag
        if drag is None:
            return
        candidate = drag.candidate
        if (candidate.start, candidate.end) == (drag.original.start, drag.original.end):
            return
        LOGGER.info(
            "Committing %s for %s: %s..%s",
            drag.mode.value,
            candidate.id,
            candidate.start.isoformat(),
            candidate.end.isoformat(),
        )
        self.commit(candidate.id, candidate.data)

    # ------------------------------------------------------------------
    def _auto_scroll(self, x: float) -> None:
        if self.scroller is not None:
            self.scroller.auto_scroll(x)

    def _transition(self, state: InteractionState) -> None:
        LOGGER.debug("Interaction %s -> %s", self._state.value, state.value)
        self._state = state

    def _reset(self) -> None:
        if self.scroller is not None:
            self.scroller.stop_auto_scroll()
        self._down = None
        self._drag = None
        self._cursor_origin = None
        if self._state is not InteractionState.IDLE:
            self._transition(InteractionState.IDLE)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change()
