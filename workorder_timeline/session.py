"""One timeline editing session: store, viewport, cursor and interactions."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Callable, List, Optional

from . import cursor as cursor_queries
from . import geometry
from .cursor import Cursor
from .interaction import CreateRequest, InteractionMachine, PointerEvent
from .models import AppSettings, TimeScale, WorkOrder, WorkOrderStatus
from .repository import OrderRepository
from .scroll import InfiniteScroller
from .store import StoreChange
from .timers import TimerQueue
from .viewport import ViewportController, data_floor

LOGGER = logging.getLogger(__name__)

DEFAULT_TRACK_WIDTH = 1200.0


class TimelineSession:
    """Wires the timeline engine together and exposes its event sinks.

    The rendering layer feeds pointer, scroll, scale and filter events in and
    reads :meth:`frame` back. Listeners added with :meth:`on_render` are
    called after anything that changes the frame; listeners added with
    :meth:`on_create_request` receive click-to-create requests.
    """

    def __init__(
        self,
        repository: OrderRepository,
        *,
        timers: Optional[TimerQueue] = None,
        now_provider: Callable[[], datetime] = datetime.now,
        scale: TimeScale = TimeScale.DAY,
        track_width: float = DEFAULT_TRACK_WIDTH,
    ) -> None:
        self.repository = repository
        self.store = repository.store
        self.now_provider = now_provider
        self.timers = timers or TimerQueue()
        self.viewport = ViewportController(scale=scale, now_provider=now_provider)
        self.cursor = Cursor(now_provider())
        self.scroller = InfiniteScroller(self.viewport, self.timers, self._data_floor)
        self.scroller.update(0.0, track_width, track_width)
        self.interaction = InteractionMachine(
            self.store,
            self.viewport,
            self.cursor,
            track_width=lambda: self.scroller.state.scroll_width,
            scroller=self.scroller,
            commit=self.repository.update,
            on_change=self._notify,
        )
        self._render_listeners: List[Callable[[], None]] = []
        self._create_listeners: List[Callable[[CreateRequest], None]] = []
        self._unsubscribe = self.store.subscribe(self._on_store_change)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load settings and orders, then snap the view to the data."""

        settings = self.repository.load_settings()
        self.viewport.zoom(settings.time_scale, self.now_provider())
        self.repository.load()
        self.fit_to_data()

    def close(self) -> None:
        self.scroller.cancel()
        self._unsubscribe()

    def fit_to_data(self) -> None:
        orders = self.store.filtered_orders()
        self.viewport.fit_to_data(orders)
        if orders:
            # The cursor starts at the left edge of the fitted window.
            self.cursor.move_to(self.viewport.start)
        self._notify()

    # ------------------------------------------------------------------
    # Event sinks
    # ------------------------------------------------------------------
    def on_render(self, listener: Callable[[], None]) -> None:
        self._render_listeners.append(listener)

    def on_create_request(self, listener: Callable[[CreateRequest], None]) -> None:
        self._create_listeners.append(listener)

    def pointer_down(self, event: PointerEvent) -> None:
        self.interaction.pointer_down(event)

    def pointer_move(self, event: PointerEvent) -> None:
        self.interaction.pointer_move(event)

    def pointer_up(self, event: PointerEvent) -> Optional[CreateRequest]:
        request = self.interaction.pointer_up(event)
        if request is not None:
            for listener in list(self._create_listeners):
                listener(request)
        return request

    def key_escape(self) -> None:
        self.interaction.escape()

    def on_scroll(self, scroll_left: float, client_width: float, scroll_width: float) -> None:
        self.scroller.update(scroll_left, client_width, scroll_width)
        if self.scroller.check():
            self._notify()

    def set_track_width(self, width: float) -> None:
        state = self.scroller.state
        self.scroller.update(state.scroll_left, state.client_width or width, width)

    def tick(self) -> int:
        """Run due timers; the UI loop calls this between events."""

        fired = self.timers.run_due()
        if fired:
            self._notify()
        return fired

    def set_scale(self, scale: TimeScale | str) -> None:
        scale = TimeScale.parse(scale)
        anchor = self.cursor.position or self.now_provider()
        self.viewport.zoom(scale, anchor)
        self.cursor.move_to(anchor)
        settings = self.repository.settings
        self.repository.save_settings(AppSettings(time_scale=scale, theme=settings.theme))
        self._notify()

    def set_status_filter(self, status: WorkOrderStatus | str) -> None:
        self.store.set_status_filter(status)

    def center_on(self, moment: datetime | date) -> None:
        if not isinstance(moment, datetime):
            moment = datetime.combine(moment, datetime.min.time())
        self.viewport.center_on(moment)
        self.cursor.move_to(moment)
        self._notify()

    def center_on_today(self) -> None:
        self.center_on(self.now_provider())

    def header_click(self, column_date: datetime) -> None:
        self.cursor.move_to(column_date)
        self._notify()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    def visible_orders(self) -> List[WorkOrder]:
        """Filtered orders with the in-progress drag candidate substituted."""

        preview = self.interaction.preview
        orders = self.store.filtered_orders()
        if preview is None:
            return orders
        return [preview if order.id == preview.id else order for order in orders]

    def active_orders(self) -> List[WorkOrder]:
        return cursor_queries.active_orders(self.cursor.position, self.visible_orders(), self.viewport.scale)

    def frame(self) -> geometry.TimelineFrame:
        start, end, scale = self.viewport.start, self.viewport.end, self.viewport.scale
        orders = self.visible_orders()
        preview = self.interaction.preview
        preview_id = preview.id if preview else None
        rows = [
            geometry.TimelineRow(
                work_center=center,
                bars=tuple(
                    geometry.visible_bars(
                        (order for order in orders if order.work_center_id == center.id),
                        start,
                        end,
                        preview_id=preview_id,
                    )
                ),
            )
            for center in self.store.work_centers
        ]
        reference = self.cursor.position or self.now_provider()
        return geometry.TimelineFrame(
            scale=scale,
            start=start,
            end=end,
            columns=tuple(geometry.build_columns(scale, start, end, reference)),
            rows=tuple(rows),
            cursor_fraction=geometry.cursor_fraction(self.cursor.position, start, end),
            period_label=cursor_queries.period_label(self.cursor.position, scale),
            period_caption=cursor_queries.current_period_caption(scale),
            active_orders=tuple(cursor_queries.active_orders(self.cursor.position, orders, scale)),
        )

    # ------------------------------------------------------------------
    def _data_floor(self) -> datetime:
        return data_floor(self.store.orders, self.now_provider())

    def _on_store_change(self, change: StoreChange) -> None:
        LOGGER.debug("Store change: %s %s", change.kind, change.order_id or "")
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._render_listeners):
            listener()
