"""Domain types for work centers, work orders and timeline scales."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping

__all__ = [
    "AppSettings",
    "DateLike",
    "DocumentError",
    "TimeScale",
    "WorkCenter",
    "WorkOrder",
    "WorkOrderData",
    "WorkOrderStatus",
    "coerce_date",
    "data_to_json",
    "order_to_document",
    "order_from_document",
    "work_center_from_document",
    "work_center_to_document",
]

DateLike = date | datetime | str


class DocumentError(ValueError):
    """Raised when a stored or transmitted document cannot be decoded."""


class TimeScale(str, Enum):
    DAY = "Day"
    WEEK = "Week"
    MONTH = "Month"

    @classmethod
    def parse(cls, value: str | "TimeScale") -> "TimeScale":
        if isinstance(value, TimeScale):
            return value
        for scale in cls:
            if scale.value.lower() == str(value).strip().lower():
                return scale
        raise ValueError(f"Unknown time scale: {value!r}")


class WorkOrderStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    COMPLETE = "complete"
    BLOCKED = "blocked"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    @property
    def bar_class(self) -> str:
        return f"bar-{self.value}"

    @property
    def badge_class(self) -> str:
        return f"status-{self.value}"


_STATUS_LABELS = {
    WorkOrderStatus.OPEN: "Open",
    WorkOrderStatus.IN_PROGRESS: "In Progress",
    WorkOrderStatus.COMPLETE: "Complete",
    WorkOrderStatus.BLOCKED: "Blocked",
}


def coerce_date(value: DateLike) -> date:
    """Return ``value`` as a calendar date.

    Accepts :class:`date`, :class:`datetime` (the time part is dropped) and ISO
    ``YYYY-MM-DD`` strings. A full ISO timestamp string is accepted as well.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if len(text) <= 10:
            return date.fromisoformat(text)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        return datetime.fromisoformat(text).date()
    except ValueError as exc:
        raise ValueError(f"Invalid calendar date: {value!r}") from exc


@dataclass(frozen=True)
class WorkCenter:
    id: str
    name: str


@dataclass(frozen=True)
class WorkOrderData:
    """Everything about a work order except its identity."""

    name: str
    work_center_id: str
    status: WorkOrderStatus
    start: date
    end: date

    @classmethod
    def create(
        cls,
        *,
        name: str,
        work_center_id: str,
        status: WorkOrderStatus | str,
        start: DateLike,
        end: DateLike,
    ) -> "WorkOrderData":
        return cls(
            name=name,
            work_center_id=work_center_id,
            status=WorkOrderStatus(status),
            start=coerce_date(start),
            end=coerce_date(end),
        )

    @property
    def duration(self):
        return self.end - self.start


@dataclass(frozen=True)
class WorkOrder:
    """A named, status-tagged date range assigned to one work center."""

    id: str
    name: str
    work_center_id: str
    status: WorkOrderStatus
    start: date
    end: date

    @classmethod
    def from_data(cls, order_id: str, data: WorkOrderData) -> "WorkOrder":
        return cls(
            id=order_id,
            name=data.name,
            work_center_id=data.work_center_id,
            status=data.status,
            start=data.start,
            end=data.end,
        )

    @property
    def data(self) -> WorkOrderData:
        return WorkOrderData(
            name=self.name,
            work_center_id=self.work_center_id,
            status=self.status,
            start=self.start,
            end=self.end,
        )

    def with_dates(self, start: date, end: date) -> "WorkOrder":
        return replace(self, start=start, end=end)

    def overlaps(self, start: date, end: date) -> bool:
        # Half-open ranges: touching endpoints do not overlap.
        return start < self.end and end > self.start


@dataclass(frozen=True)
class AppSettings:
    time_scale: TimeScale = TimeScale.DAY
    theme: str = "light"

    def to_json(self) -> dict[str, str]:
        return {"timeScale": self.time_scale.value, "theme": self.theme}

    @classmethod
    def from_json(cls, payload: Mapping[str, Any] | None) -> "AppSettings":
        if not isinstance(payload, Mapping):
            return cls()
        try:
            scale = TimeScale.parse(payload.get("timeScale", TimeScale.DAY))
        except ValueError:
            scale = TimeScale.DAY
        theme = str(payload.get("theme") or "light")
        return cls(time_scale=scale, theme=theme)


# ---------------------------------------------------------------------------
# Document encoding shared by the persistence backends
# ---------------------------------------------------------------------------


def order_to_document(order: WorkOrder) -> dict[str, Any]:
    return {
        "docId": order.id,
        "docType": "workOrder",
        "data": data_to_json(order.data),
    }


def data_to_json(data: WorkOrderData) -> dict[str, str]:
    return {
        "name": data.name,
        "workCenterId": data.work_center_id,
        "status": data.status.value,
        "startDate": data.start.isoformat(),
        "endDate": data.end.isoformat(),
    }


def order_from_document(document: Mapping[str, Any]) -> WorkOrder:
    if not isinstance(document, Mapping):
        raise DocumentError(f"Work order document must be an object, got {type(document).__name__}")
    payload = document.get("data")
    doc_id = document.get("docId")
    if not doc_id or not isinstance(payload, Mapping):
        raise DocumentError(f"Work order document is missing 'docId' or 'data': {document!r}")
    try:
        data = WorkOrderData.create(
            name=str(payload["name"]),
            work_center_id=str(payload["workCenterId"]),
            status=payload["status"],
            start=payload["startDate"],
            end=payload["endDate"],
        )
    except (KeyError, ValueError) as exc:
        raise DocumentError(f"Malformed work order {doc_id!r}: {exc}") from exc
    return WorkOrder.from_data(str(doc_id), data)


def work_center_to_document(center: WorkCenter) -> dict[str, Any]:
    return {"docId": center.id, "docType": "workCenter", "data": {"name": center.name}}


def work_center_from_document(document: Mapping[str, Any]) -> WorkCenter:
    try:
        return WorkCenter(id=str(document["docId"]), name=str(document["data"]["name"]))
    except (KeyError, TypeError) as exc:
        raise DocumentError(f"Malformed work center document: {document!r}") from exc
