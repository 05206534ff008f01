"""Top-level package for the work order timeline engine."""

from __future__ import annotations

from .models import TimeScale, WorkCenter, WorkOrder, WorkOrderData, WorkOrderStatus
from .repository import OrderRepository
from .session import TimelineSession
from .store import OrderStore

__all__ = [
    "__version__",
    "OrderRepository",
    "OrderStore",
    "TimeScale",
    "TimelineSession",
    "WorkCenter",
    "WorkOrder",
    "WorkOrderData",
    "WorkOrderStatus",
]

__version__ = "0.1.0"
