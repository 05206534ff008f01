"""Abstract persistence collaborator used by the timeline session."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..models import AppSettings, WorkCenter, WorkOrder, WorkOrderData


class PersistenceError(RuntimeError):
    """Raised when the backing store cannot be read or written."""


class PersistenceBackend(ABC):
    """Defines the operations the timeline needs from a backing store."""

    @abstractmethod
    def list_orders(self) -> List[WorkOrder]:
        """Return every stored work order."""

    @abstractmethod
    def list_work_centers(self) -> List[WorkCenter]:
        """Return the configured work centers."""

    @abstractmethod
    def create_order(self, order: WorkOrder) -> WorkOrder:
        """Store a new order and return it as persisted."""

    @abstractmethod
    def update_order(self, order_id: str, data: WorkOrderData) -> None:
        """Replace the payload of an existing order."""

    @abstractmethod
    def delete_order(self, order_id: str) -> None:
        """Remove an order."""

    @abstractmethod
    def get_settings(self) -> AppSettings:
        """Return the saved user settings."""

    @abstractmethod
    def save_settings(self, settings: AppSettings) -> AppSettings:
        """Persist ``settings`` and return the stored values."""
