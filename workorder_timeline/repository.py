"""Keeps the order store in step with the persistence backend."""

from __future__ import annotations

import logging
from typing import List, Optional

from .editing import SubmitResult, WorkOrderDraft, check_draft
from .models import AppSettings, WorkCenter, WorkOrder, WorkOrderData
from .persistence import PersistenceBackend
from .sample_data import DEFAULT_WORK_CENTERS
from .store import OrderStore

LOGGER = logging.getLogger(__name__)


class OrderRepository:
    """Write-through wrapper around :class:`OrderStore`.

    The in-memory store is always updated first. Backend failures are logged
    and otherwise ignored, so the timeline keeps working on its last-known
    state when the backend is unreachable.
    """

    def __init__(self, store: OrderStore, backend: PersistenceBackend, *, logger: logging.Logger | None = None) -> None:
        self.store = store
        self.backend = backend
        self.logger = logger or LOGGER
        self._cached_orders: List[WorkOrder] = []
        self._settings = AppSettings()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def load(self) -> List[WorkOrder]:
        """Replace the store contents with the backend's data."""

        centers = self._load_work_centers()
        try:
            orders = self.backend.list_orders()
        except Exception:
            self.logger.exception("Failed to load work orders; keeping the last known collection")
            orders = list(self._cached_orders)
        else:
            self._cached_orders = list(orders)

        self.store.set_work_centers(centers)
        self.store.replace_orders(orders)
        self.logger.info("Loaded %d work orders across %d work centers", len(orders), len(centers))
        return orders

    def load_settings(self) -> AppSettings:
        try:
            self._settings = self.backend.get_settings()
        except Exception:
            self.logger.exception("Failed to load settings; using defaults")
            self._settings = AppSettings()
        return self._settings

    def save_settings(self, settings: AppSettings) -> AppSettings:
        self._settings = settings
        try:
            self._settings = self.backend.save_settings(settings)
        except Exception:
            self.logger.exception("Failed to save settings")
        return self._settings

    # ------------------------------------------------------------------
    def create(self, data: WorkOrderData) -> WorkOrder:
        order = self.store.add(data)
        try:
            self.backend.create_order(order)
        except Exception:
            self.logger.exception("Failed to persist new work order %s", order.id)
        self._cached_orders = self.store.orders
        return order

    def update(self, order_id: str, data: WorkOrderData) -> None:
        if order_id not in self.store:
            return
        self.store.update(order_id, data)
        try:
            self.backend.update_order(order_id, data)
        except Exception:
            self.logger.exception("Failed to persist update of work order %s", order_id)
        self._cached_orders = self.store.orders

    def delete(self, order_id: str) -> None:
        if order_id not in self.store:
            return
        self.store.delete(order_id)
        try:
            self.backend.delete_order(order_id)
        except Exception:
            self.logger.exception("Failed to persist deletion of work order %s", order_id)
        self._cached_orders = self.store.orders

    def submit_create(self, draft: WorkOrderDraft) -> SubmitResult:
        result = check_draft(self.store, draft)
        if result.ok:
            result.order = self.create(draft.to_data())
        return result

    def submit_edit(self, order_id: str, draft: WorkOrderDraft) -> SubmitResult:
        result = check_draft(self.store, draft, exclude_id=order_id)
        if result.ok and order_id in self.store:
            self.update(order_id, draft.to_data())
            result.order = self.store.get(order_id)
        return result

    # ------------------------------------------------------------------
    def _load_work_centers(self) -> List[WorkCenter]:
        try:
            centers = self.backend.list_work_centers()
        except Exception:
            self.logger.exception("Failed to load work centers; using defaults")
            centers = []
        return centers or self.store.work_centers or list(DEFAULT_WORK_CENTERS)

    def get(self, order_id: str) -> Optional[WorkOrder]:
        return self.store.get(order_id)
