from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from workorder_timeline.cursor import Cursor
from workorder_timeline.interaction import (
    CreateRequest,
    DragMode,
    HitTarget,
    InteractionMachine,
    InteractionState,
    PointerEvent,
    TargetKind,
)
from workorder_timeline.models import TimeScale, WorkCenter, WorkOrder, WorkOrderData
from workorder_timeline.store import OrderStore
from workorder_timeline.viewport import ViewportController

NOW = datetime(2024, 3, 15, 12, 0)
# The default Day window is Mar 05 - Mar 26: 21 days over 2100 px, 100 px per day.
TRACK_WIDTH = 2100.0


class FakeScroller:
    def __init__(self) -> None:
        self.auto_scroll_calls: list[float] = []
        self.checks = 0
        self.stops = 0

    def check(self) -> Optional[str]:
        self.checks += 1
        return None

    def auto_scroll(self, pointer_x: float) -> int:
        self.auto_scroll_calls.append(pointer_x)
        return 0

    def stop_auto_scroll(self) -> None:
        self.stops += 1


class Harness:
    def __init__(self) -> None:
        self.store = OrderStore([WorkCenter("wc-1", "Extrusion Line A"), WorkCenter("wc-2", "CNC Machine 1")])
        self.viewport = ViewportController(scale=TimeScale.DAY, now_provider=lambda: NOW)
        self.cursor = Cursor(NOW)
        self.scroller = FakeScroller()
        self.commits: list[tuple[str, WorkOrderData]] = []
        self.changes = 0
        self.machine = InteractionMachine(
            self.store,
            self.viewport,
            self.cursor,
            track_width=lambda: TRACK_WIDTH,
            scroller=self.scroller,
            commit=self._commit,
            on_change=self._on_change,
        )

    def add(self, name: str, start: str, end: str, center: str = "wc-1") -> WorkOrder:
        return self.store.add(
            WorkOrderData.create(name=name, work_center_id=center, status="open", start=start, end=end)
        )

    def _commit(self, order_id: str, data: WorkOrderData) -> None:
        self.commits.append((order_id, data))
        self.store.update(order_id, data)

    def _on_change(self) -> None:
        self.changes += 1


def _track(center: str = "wc-1") -> HitTarget:
    return HitTarget(TargetKind.EMPTY_TRACK, work_center_id=center)


def _bar(order: WorkOrder, kind: TargetKind = TargetKind.BAR_BODY) -> HitTarget:
    return HitTarget(kind, order_id=order.id, work_center_id=order.work_center_id)


@pytest.fixture
def harness() -> Harness:
    return Harness()


def test_time_at_maps_track_pixels_through_viewport(harness) -> None:
    assert harness.machine.time_at(0) == datetime(2024, 3, 5)
    assert harness.machine.time_at(550) == datetime(2024, 3, 10, 12)


def test_click_on_empty_track_requests_create(harness) -> None:
    machine = harness.machine

    machine.pointer_down(PointerEvent(530, 10, _track("wc-2")))
    assert machine.state is InteractionState.POTENTIAL_CLICK
    machine.pointer_move(PointerEvent(532, 11, _track("wc-2")))
    assert machine.state is InteractionState.POTENTIAL_CLICK

    request = machine.pointer_up(PointerEvent(532, 11, _track("wc-2")))

    assert request == CreateRequest(work_center_id="wc-2", start=date(2024, 3, 10))
    assert machine.state is InteractionState.IDLE


def test_click_rounds_to_nearest_day(harness) -> None:
    machine = harness.machine

    machine.pointer_down(PointerEvent(560, 0, _track()))
    request = machine.pointer_up(PointerEvent(560, 0, _track()))

    assert request == CreateRequest(work_center_id="wc-1", start=date(2024, 3, 11))


def test_drag_past_threshold_pans_instead_of_clicking(harness) -> None:
    machine = harness.machine
    start = harness.viewport.start

    machine.pointer_down(PointerEvent(500, 0, _track()))
    machine.pointer_move(PointerEvent(520, 0, _track()))
    assert machine.state is InteractionState.PANNING
    machine.pointer_move(PointerEvent(620, 0, _track()))

    request = machine.pointer_up(PointerEvent(620, 0, _track()))

    assert request is None
    assert harness.viewport.start == start - timedelta(days=1, hours=4, minutes=48)
    assert harness.viewport.span == timedelta(days=21)
    assert machine.state is InteractionState.IDLE


def test_vertical_movement_also_crosses_threshold(harness) -> None:
    machine = harness.machine

    machine.pointer_down(PointerEvent(500, 0, _track()))
    machine.pointer_move(PointerEvent(501, 6, _track()))

    assert machine.state is InteractionState.PANNING
    assert machine.pointer_up(PointerEvent(501, 6, _track())) is None


def test_escape_restores_viewport_after_pan(harness) -> None:
    machine = harness.machine
    before = harness.viewport.state

    machine.pointer_down(PointerEvent(500, 0, _track()))
    machine.pointer_move(PointerEvent(900, 0, _track()))
    machine.escape()

    assert harness.viewport.state == before
    assert machine.state is InteractionState.IDLE


def test_move_edits_candidate_and_commits_once_on_release(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    machine = harness.machine

    machine.pointer_down(PointerEvent(550, 0, _bar(order)))
    assert machine.state is InteractionState.BAR_DRAGGING
    assert machine.drag_mode is DragMode.MOVE

    machine.pointer_move(PointerEvent(700, 0, _bar(order)))
    machine.pointer_move(PointerEvent(850, 0, _bar(order)))

    preview = machine.preview
    assert preview is not None
    assert (preview.start, preview.end) == (date(2024, 3, 13), date(2024, 3, 16))
    assert harness.store.get(order.id) == order
    assert harness.commits == []

    machine.pointer_up(PointerEvent(850, 0, _bar(order)))

    stored = harness.store.get(order.id)
    assert (stored.start, stored.end) == (date(2024, 3, 13), date(2024, 3, 16))
    assert len(harness.commits) == 1
    assert machine.preview is None
    assert harness.scroller.stops >= 1


def test_move_preserves_duration_and_skips_conflicting_frames(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    harness.add("Blocker", "2024-03-17", "2024-03-20")
    machine = harness.machine

    machine.pointer_down(PointerEvent(550, 0, _bar(order)))
    machine.pointer_move(PointerEvent(1050, 0, _bar(order)))
    assert (machine.preview.start, machine.preview.end) == (order.start, order.end)

    machine.pointer_move(PointerEvent(850, 0, _bar(order)))
    machine.pointer_move(PointerEvent(1150, 0, _bar(order)))
    machine.pointer_up(PointerEvent(1150, 0, _bar(order)))

    stored = harness.store.get(order.id)
    assert (stored.start, stored.end) == (date(2024, 3, 13), date(2024, 3, 16))
    assert stored.end - stored.start == order.end - order.start


def test_move_onto_adjacent_slot_is_allowed(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    harness.add("Neighbour", "2024-03-17", "2024-03-20")
    machine = harness.machine

    machine.pointer_down(PointerEvent(550, 0, _bar(order)))
    machine.pointer_move(PointerEvent(950, 0, _bar(order)))
    machine.pointer_up(PointerEvent(950, 0, _bar(order)))

    stored = harness.store.get(order.id)
    assert (stored.start, stored.end) == (date(2024, 3, 14), date(2024, 3, 17))


def test_resize_end_before_start_leaves_order_unchanged(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    machine = harness.machine

    machine.pointer_down(PointerEvent(800, 0, _bar(order, TargetKind.BAR_END_HANDLE)))
    assert machine.drag_mode is DragMode.RESIZE_END
    machine.pointer_move(PointerEvent(200, 0, _bar(order, TargetKind.BAR_END_HANDLE)))
    machine.pointer_up(PointerEvent(200, 0, _bar(order, TargetKind.BAR_END_HANDLE)))

    assert harness.store.get(order.id) == order
    assert harness.commits == []


def test_resize_start_changes_only_start(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    machine = harness.machine

    machine.pointer_down(PointerEvent(500, 0, _bar(order, TargetKind.BAR_START_HANDLE)))
    machine.pointer_move(PointerEvent(290, 0, _bar(order, TargetKind.BAR_START_HANDLE)))
    machine.pointer_up(PointerEvent(290, 0, _bar(order, TargetKind.BAR_START_HANDLE)))

    stored = harness.store.get(order.id)
    assert (stored.start, stored.end) == (date(2024, 3, 8), date(2024, 3, 13))


def test_resize_end_is_blocked_by_overlap(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    harness.add("Blocker", "2024-03-15", "2024-03-18")
    machine = harness.machine

    machine.pointer_down(PointerEvent(800, 0, _bar(order, TargetKind.BAR_END_HANDLE)))
    machine.pointer_move(PointerEvent(1000, 0, _bar(order, TargetKind.BAR_END_HANDLE)))
    machine.pointer_move(PointerEvent(1100, 0, _bar(order, TargetKind.BAR_END_HANDLE)))
    machine.pointer_up(PointerEvent(1100, 0, _bar(order, TargetKind.BAR_END_HANDLE)))

    assert harness.store.get(order.id).end == date(2024, 3, 15)


def test_escape_discards_bar_candidate(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    machine = harness.machine

    machine.pointer_down(PointerEvent(550, 0, _bar(order)))
    machine.pointer_move(PointerEvent(850, 0, _bar(order)))
    machine.escape()
    machine.pointer_up(PointerEvent(850, 0, _bar(order)))

    assert harness.store.get(order.id) == order
    assert harness.commits == []
    assert machine.state is InteractionState.IDLE


def test_bar_drag_requests_auto_scroll_and_scroll_checks(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    machine = harness.machine

    machine.pointer_down(PointerEvent(550, 0, _bar(order)))
    machine.pointer_move(PointerEvent(2050, 0, _bar(order)))

    assert harness.scroller.auto_scroll_calls == [2050]
    assert harness.scroller.checks == 1


def test_cursor_drag_is_clamped_and_escape_restores(harness) -> None:
    machine = harness.machine
    handle = HitTarget(TargetKind.CURSOR_HANDLE)

    machine.pointer_down(PointerEvent(1050, 0, handle))
    assert machine.state is InteractionState.CURSOR_DRAGGING
    machine.pointer_move(PointerEvent(1200, 0, handle))
    assert harness.cursor.position == datetime(2024, 3, 17)
    machine.pointer_move(PointerEvent(5000, 0, handle))
    assert harness.cursor.position == harness.viewport.end

    machine.escape()

    assert harness.cursor.position == NOW
    assert machine.state is InteractionState.IDLE


def test_cursor_drag_release_keeps_position(harness) -> None:
    machine = harness.machine
    handle = HitTarget(TargetKind.CURSOR_HANDLE)

    machine.pointer_down(PointerEvent(1050, 0, handle))
    machine.pointer_move(PointerEvent(-300, 0, handle))
    machine.pointer_up(PointerEvent(-300, 0, handle))

    assert harness.cursor.position == harness.viewport.start


def test_secondary_button_and_busy_machine_ignore_pointer_down(harness) -> None:
    order = harness.add("Bracket", "2024-03-10", "2024-03-13")
    machine = harness.machine

    machine.pointer_down(PointerEvent(550, 0, _bar(order), button=2))
    assert machine.state is InteractionState.IDLE

    machine.pointer_down(PointerEvent(500, 0, _track()))
    machine.pointer_down(PointerEvent(550, 0, _bar(order)))
    assert machine.state is InteractionState.POTENTIAL_CLICK


def test_unknown_bar_does_not_start_drag(harness) -> None:
    machine = harness.machine

    machine.pointer_down(PointerEvent(550, 0, HitTarget(TargetKind.BAR_BODY, order_id="missing")))

    assert machine.state is InteractionState.IDLE


def test_listeners_are_notified_of_changes(harness) -> None:
    machine = harness.machine

    machine.pointer_down(PointerEvent(500, 0, _track()))
    machine.pointer_move(PointerEvent(600, 0, _track()))
    machine.pointer_up(PointerEvent(600, 0, _track()))

    assert harness.changes >= 2
