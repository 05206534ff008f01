"""Observable in-memory store for work centers and work orders."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .models import DateLike, WorkCenter, WorkOrder, WorkOrderData, WorkOrderStatus, coerce_date

LOGGER = logging.getLogger(__name__)

ALL_STATUSES = "all"


@dataclass(frozen=True)
class StoreChange:
    """Describes a mutation delivered to store observers."""

    kind: str
    order_id: Optional[str] = None


StoreObserver = Callable[[StoreChange], None]


class OrderStore:
    """Holds the shared order collection and publishes every mutation.

    Orders keep their insertion order and are additionally indexed by work
    center so overlap checks only scan the orders of one center. The store does
    not validate overlaps on write: callers consult :meth:`check_overlap` first.
    """

    def __init__(
        self,
        work_centers: Iterable[WorkCenter] = (),
        orders: Iterable[WorkOrder] = (),
        *,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._id_factory = id_factory
        self._work_centers: List[WorkCenter] = list(work_centers)
        self._orders: Dict[str, WorkOrder] = {}
        self._by_center: Dict[str, List[str]] = {}
        self._observers: List[StoreObserver] = []
        self._status_filter: WorkOrderStatus | str = ALL_STATUSES
        for order in orders:
            self._insert(order)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, observer: StoreObserver) -> Callable[[], None]:
        """Register ``observer``; the returned callable unsubscribes it."""

        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _publish(self, kind: str, order_id: Optional[str] = None) -> None:
        change = StoreChange(kind=kind, order_id=order_id)
        for observer in list(self._observers):
            try:
                observer(change)
            except Exception:
                LOGGER.exception("Store observer failed while handling %s", kind)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def orders(self) -> List[WorkOrder]:
        return list(self._orders.values())

    @property
    def work_centers(self) -> List[WorkCenter]:
        return list(self._work_centers)

    @property
    def status_filter(self) -> WorkOrderStatus | str:
        return self._status_filter

    def __len__(self) -> int:
        return len(self._orders)

    def __contains__(self, order_id: object) -> bool:
        return order_id in self._orders

    def get(self, order_id: str) -> Optional[WorkOrder]:
        return self._orders.get(order_id)

    def orders_for_center(self, work_center_id: str) -> List[WorkOrder]:
        return [self._orders[order_id] for order_id in self._by_center.get(work_center_id, [])]

    def filtered_orders(self) -> List[WorkOrder]:
        if self._status_filter == ALL_STATUSES:
            return self.orders
        return [order for order in self._orders.values() if order.status is self._status_filter]

    def work_center_name(self, work_center_id: str) -> str:
        for center in self._work_centers:
            if center.id == work_center_id:
                return center.name
        return "Unknown"

    def check_overlap(
        self,
        work_center_id: str,
        start: DateLike,
        end: DateLike,
        exclude_id: Optional[str] = None,
    ) -> Optional[WorkOrder]:
        """Return the first order on ``work_center_id`` overlapping ``[start, end)``."""

        start_date = coerce_date(start)
        end_date = coerce_date(end)
        for order_id in self._by_center.get(work_center_id, []):
            if order_id == exclude_id:
                continue
            order = self._orders[order_id]
            if order.overlaps(start_date, end_date):
                return order
        return None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def add(self, data: WorkOrderData) -> WorkOrder:
        order = WorkOrder.from_data(self._id_factory(), data)
        self._insert(order)
        LOGGER.debug("Added work order %s on %s", order.id, order.work_center_id)
        self._publish("add", order.id)
        return order

    def update(self, order_id: str, data: WorkOrderData) -> None:
        existing = self._orders.get(order_id)
        if existing is None:
            return
        updated = WorkOrder.from_data(order_id, data)
        if updated.work_center_id != existing.work_center_id:
            self._by_center[existing.work_center_id].remove(order_id)
            self._by_center.setdefault(updated.work_center_id, []).append(order_id)
        self._orders[order_id] = updated
        self._publish("update", order_id)

    def delete(self, order_id: str) -> None:
        existing = self._orders.pop(order_id, None)
        if existing is None:
            return
        self._by_center[existing.work_center_id].remove(order_id)
        self._publish("delete", order_id)

    def replace_orders(self, orders: Sequence[WorkOrder]) -> None:
        self._orders.clear()
        self._by_center.clear()
        for order in orders:
            self._insert(order)
        self._publish("reset")

    def set_work_centers(self, work_centers: Sequence[WorkCenter]) -> None:
        self._work_centers = list(work_centers)
        self._publish("work-centers")

    def rename_work_center(self, work_center_id: str, name: str) -> None:
        for index, center in enumerate(self._work_centers):
            if center.id == work_center_id:
                self._work_centers[index] = WorkCenter(id=center.id, name=name)
                self._publish("work-centers")
                return

    def set_status_filter(self, status: WorkOrderStatus | str) -> None:
        value: WorkOrderStatus | str = (
            ALL_STATUSES if status == ALL_STATUSES else WorkOrderStatus(status)
        )
        if value == self._status_filter:
            return
        self._status_filter = value
        self._publish("filter")

    def _insert(self, order: WorkOrder) -> None:
        if order.id in self._orders:
            self._by_center[self._orders[order.id].work_center_id].remove(order.id)
        self._orders[order.id] = order
        self._by_center.setdefault(order.work_center_id, []).append(order.id)
