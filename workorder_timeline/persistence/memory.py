"""Volatile backend used by tests and the ``memory`` data source."""
from __future__ import annotations

from typing import Dict, Iterable, List

from ..models import AppSettings, WorkCenter, WorkOrder, WorkOrderData
from .base import PersistenceBackend


class InMemoryBackend(PersistenceBackend):
    def __init__(
        self,
        orders: Iterable[WorkOrder] = (),
        work_centers: Iterable[WorkCenter] = (),
        settings: AppSettings | None = None,
    ) -> None:
        self._orders: Dict[str, WorkOrder] = {order.id: order for order in orders}
        self._work_centers = list(work_centers)
        self._settings = settings or AppSettings()

    def list_orders(self) -> List[WorkOrder]:
        return list(self._orders.values())

    def list_work_centers(self) -> List[WorkCenter]:
        return list(self._work_centers)

    def create_order(self, order: WorkOrder) -> WorkOrder:
        self._orders[order.id] = order
        return order

    def update_order(self, order_id: str, data: WorkOrderData) -> None:
        if order_id in self._orders:
            self._orders[order_id] = WorkOrder.from_data(order_id, data)

    def delete_order(self, order_id: str) -> None:
        self._orders.pop(order_id, None)

    def get_settings(self) -> AppSettings:
        return self._settings

    def save_settings(self, settings: AppSettings) -> AppSettings:
        self._settings = settings
        return settings
