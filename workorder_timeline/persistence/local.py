"""Single-file JSON backend, the desktop stand-in for browser storage."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List

from ..models import (
    AppSettings,
    DocumentError,
    WorkCenter,
    WorkOrder,
    WorkOrderData,
    order_from_document,
    order_to_document,
    work_center_from_document,
    work_center_to_document,
)
from ..sample_data import DEFAULT_WORK_CENTERS, generate_sample_orders
from .base import PersistenceBackend, PersistenceError

LOGGER = logging.getLogger(__name__)


class JsonFileBackend(PersistenceBackend):
    """Stores orders, work centers and settings in one JSON document.

    A missing file is created and seeded with generated demo orders unless
    ``seed`` is false. Every write rewrites the document through a temporary
    file so a crash never leaves a truncated store behind.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        seed: bool = True,
        now_provider: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.path = Path(path)
        self.seed = seed
        self.now_provider = now_provider

    # ------------------------------------------------------------------
    def list_orders(self) -> List[WorkOrder]:
        orders: List[WorkOrder] = []
        for document in self._load().get("orders", []):
            try:
                orders.append(order_from_document(document))
            except DocumentError as exc:
                LOGGER.warning("Skipping malformed work order in %s: %s", self.path.name, exc)
        return orders

    def list_work_centers(self) -> List[WorkCenter]:
        documents = self._load().get("workCenters") or []
        try:
            centers = [work_center_from_document(document) for document in documents]
        except DocumentError as exc:
            raise PersistenceError(f"Invalid work centers in {self.path}: {exc}") from exc
        return centers or list(DEFAULT_WORK_CENTERS)

    def create_order(self, order: WorkOrder) -> WorkOrder:
        document = self._load()
        document.setdefault("orders", []).append(order_to_document(order))
        self._write(document)
        return order

    def update_order(self, order_id: str, data: WorkOrderData) -> None:
        document = self._load()
        orders = document.setdefault("orders", [])
        for index, existing in enumerate(orders):
            if isinstance(existing, dict) and existing.get("docId") == order_id:
                orders[index] = order_to_document(WorkOrder.from_data(order_id, data))
                self._write(document)
                return

    def delete_order(self, order_id: str) -> None:
        document = self._load()
        orders = document.get("orders", [])
        remaining = [item for item in orders if not (isinstance(item, dict) and item.get("docId") == order_id)]
        if len(remaining) != len(orders):
            document["orders"] = remaining
            self._write(document)

    def get_settings(self) -> AppSettings:
        return AppSettings.from_json(self._load().get("settings"))

    def save_settings(self, settings: AppSettings) -> AppSettings:
        document = self._load()
        merged = dict(document.get("settings") or {})
        merged.update(settings.to_json())
        document["settings"] = merged
        self._write(document)
        return AppSettings.from_json(merged)

    # ------------------------------------------------------------------
    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            document = self._initial_document()
            self._write(document)
            return document
        try:
            document = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise PersistenceError(f"Unable to read {self.path}: {exc}") from exc
        if isinstance(document, list):
            # Older files hold just the order array.
            document = {"orders": document}
        if not isinstance(document, dict):
            raise PersistenceError(f"Unexpected document in {self.path}")
        return document

    def _initial_document(self) -> Dict[str, Any]:
        orders = generate_sample_orders(self.now_provider()) if self.seed else []
        LOGGER.info("Creating %s with %d sample work orders", self.path, len(orders))
        return {
            "workCenters": [work_center_to_document(center) for center in DEFAULT_WORK_CENTERS],
            "orders": [order_to_document(order) for order in orders],
            "settings": AppSettings().to_json(),
        }

    def _write(self, document: Dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise PersistenceError(f"Unable to write {self.path}: {exc}") from exc
