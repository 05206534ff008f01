"""Infinite scroll and drag auto-scroll for the rendered timeline window."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .timers import TimerHandle, TimerQueue
from .viewport import ViewportController

LOGGER = logging.getLogger(__name__)

COLUMN_MIN_WIDTH = 106.25
EXPANSION_FACTOR = 0.5
EXPANSION_DEBOUNCE = 0.05
AUTO_SCROLL_EDGE = 120.0
AUTO_SCROLL_STEP = 25.0
AUTO_SCROLL_INTERVAL = 0.016


@dataclass
class ScrollState:
    """Scroll container metrics reported by the rendering layer, in pixels."""

    scroll_left: float = 0.0
    client_width: float = 0.0
    scroll_width: float = 0.0

    @property
    def max_scroll_left(self) -> float:
        return max(self.scroll_width - self.client_width, 0.0)

    @property
    def visible_right(self) -> float:
        return self.scroll_left + self.client_width

    def scroll_to(self, position: float) -> None:
        self.scroll_left = min(max(position, 0.0), self.max_scroll_left)


class InfiniteScroller:
    """Grows the viewport when the visible area nears either end of the window.

    The scroll width scales with the viewport span so the pixel density stays
    constant across expansions. After each expansion further checks are held
    off until the debounce timer fires.
    """

    def __init__(
        self,
        viewport: ViewportController,
        timers: TimerQueue,
        floor_provider: Callable[[], datetime],
        *,
        buffer: float = COLUMN_MIN_WIDTH * 2,
        debounce: float = EXPANSION_DEBOUNCE,
    ) -> None:
        self.viewport = viewport
        self.timers = timers
        self.floor_provider = floor_provider
        self.buffer = buffer
        self.debounce = debounce
        self.state = ScrollState()
        self._cooldown: Optional[TimerHandle] = None
        self._auto_tick: Optional[TimerHandle] = None
        self._auto_direction = 0

    @property
    def busy(self) -> bool:
        return self._cooldown is not None and self._cooldown.pending

    def update(self, scroll_left: float, client_width: float, scroll_width: float) -> None:
        self.state = ScrollState(scroll_left, client_width, scroll_width)

    def check(self) -> str | None:
        """Expand the window if the visible area is close to an edge.

        Returns ``"right"``/``"left"`` for the side that grew, else ``None``.
        """

        state = self.state
        if self.busy or state.scroll_width <= 0:
            return None

        if state.visible_right >= state.scroll_width - self.buffer:
            old_span = self.viewport.span
            self.viewport.expand_right(old_span * EXPANSION_FACTOR)
            self._rescale_width(old_span)
            LOGGER.debug("Expanded viewport right to %s", self.viewport.end.isoformat())
            self._start_cooldown()
            return "right"

        if state.scroll_left <= self.buffer:
            old_span = self.viewport.span
            old_width = state.scroll_width
            if not self.viewport.expand_left(old_span * EXPANSION_FACTOR, self.floor_provider()):
                return None
            self._rescale_width(old_span)
            # Keep the same instant under the visible area.
            state.scroll_left += state.scroll_width - old_width
            LOGGER.debug("Expanded viewport left to %s", self.viewport.start.isoformat())
            self._start_cooldown()
            return "left"

        return None

    # ------------------------------------------------------------------
    # Auto-scroll while dragging
    # ------------------------------------------------------------------
    def auto_scroll(self, pointer_x: float) -> int:
        """Keep scrolling toward the edge the pointer is hovering near.

        Returns the direction (-1, 0 or 1). Ticks are coalesced: at most one is
        pending at a time, and leaving the edge zone stops the next tick.
        """

        direction = self._edge_direction(pointer_x)
        self._auto_direction = direction
        if direction == 0:
            self.stop_auto_scroll()
            return 0
        if self._auto_tick is None or not self._auto_tick.pending:
            self._step()
            self._auto_tick = self.timers.schedule(
                AUTO_SCROLL_INTERVAL, self._tick, label="auto-scroll"
            )
        return direction

    def stop_auto_scroll(self) -> None:
        if self._auto_tick is not None:
            self._auto_tick.cancel()
            self._auto_tick = None
        self._auto_direction = 0

    def cancel(self) -> None:
        self.stop_auto_scroll()
        if self._cooldown is not None:
            self._cooldown.cancel()
            self._cooldown = None

    def _tick(self) -> None:
        if self._auto_direction == 0:
            return
        self._step()
        self._auto_tick = self.timers.schedule(AUTO_SCROLL_INTERVAL, self._tick, label="auto-scroll")

    def _step(self) -> None:
        self.state.scroll_to(self.state.scroll_left + AUTO_SCROLL_STEP * self._auto_direction)
        self.check()

    def _edge_direction(self, pointer_x: float) -> int:
        state = self.state
        if state.client_width <= 0:
            return 0
        if pointer_x >= state.visible_right - AUTO_SCROLL_EDGE:
            return 1
        if pointer_x <= state.scroll_left + AUTO_SCROLL_EDGE:
            return -1
        return 0

    # ------------------------------------------------------------------
    def _rescale_width(self, old_span) -> None:
        if old_span.total_seconds() <= 0:
            return
        self.state.scroll_width *= self.viewport.span / old_span

    def _start_cooldown(self) -> None:
        self._cooldown = self.timers.schedule(self.debounce, self._end_cooldown, label="scroll-debounce")

    def _end_cooldown(self) -> None:
        self._cooldown = None
