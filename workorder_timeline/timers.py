"""Cancelable one-shot timers for the single-threaded interaction loop."""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

LOGGER = logging.getLogger(__name__)


@dataclass
class TimerHandle:
    """Reference to a scheduled callback."""

    due: float
    callback: Callable[[], None]
    label: str = ""
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        if self.pending:
            LOGGER.debug("Cancelling timer %s", self.label or "<unnamed>")
        self.cancelled = True


@dataclass(order=True)
class _Entry:
    due: float
    sequence: int
    handle: TimerHandle = field(compare=False)


class TimerQueue:
    """Debounce and tick timers driven by the owner's event loop.

    Nothing runs on a background thread: the loop calls :meth:`run_due` and
    every callback whose due time has passed runs to completion, in due order
    with ties broken by scheduling order.
    """

    def __init__(self, time_provider: Callable[[], float] = time.monotonic) -> None:
        self.time_provider = time_provider
        self._heap: List[_Entry] = []
        self._sequence = itertools.count()

    def schedule(self, delay: float, callback: Callable[[], None], *, label: str = "") -> TimerHandle:
        """Run ``callback`` once ``delay`` seconds from now."""

        due = self.time_provider() + max(delay, 0.0)
        handle = TimerHandle(due=due, callback=callback, label=label)
        heapq.heappush(self._heap, _Entry(due, next(self._sequence), handle))
        return handle

    def next_due(self) -> Optional[float]:
        self._discard_cancelled()
        return self._heap[0].due if self._heap else None

    def run_due(self) -> int:
        """Fire every timer that is due; returns how many callbacks ran."""

        fired = 0
        now = self.time_provider()
        while self._heap and self._heap[0].due <= now:
            entry = heapq.heappop(self._heap)
            handle = entry.handle
            if not handle.pending:
                continue
            handle.fired = True
            LOGGER.debug("Firing timer %s", handle.label or "<unnamed>")
            handle.callback()
            fired += 1
        return fired

    def cancel_all(self) -> None:
        for entry in self._heap:
            entry.handle.cancel()
        self._heap.clear()

    def __len__(self) -> int:
        return sum(1 for entry in self._heap if entry.handle.pending)

    def _discard_cancelled(self) -> None:
        while self._heap and not self._heap[0].handle.pending:
            heapq.heappop(self._heap)
