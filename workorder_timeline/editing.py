"""Validation for the create and edit forms.

Form submissions never raise for bad input: they return a
:class:`SubmitResult` carrying the errors or the conflicting order so the
caller can show a message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import List, Optional

from .interaction import CreateRequest
from .models import DateLike, WorkOrder, WorkOrderData, WorkOrderStatus, coerce_date
from .store import OrderStore

DEFAULT_DURATION = timedelta(days=7)


@dataclass
class WorkOrderDraft:
    name: str
    work_center_id: str
    start: Optional[DateLike]
    end: Optional[DateLike]
    status: WorkOrderStatus | str = WorkOrderStatus.OPEN

    @classmethod
    def for_create(cls, request: CreateRequest, *, name: str = "") -> "WorkOrderDraft":
        return cls(
            name=name,
            work_center_id=request.work_center_id,
            start=request.start,
            end=request.start + DEFAULT_DURATION,
        )

    @classmethod
    def for_edit(cls, order: WorkOrder) -> "WorkOrderDraft":
        return cls(
            name=order.name,
            work_center_id=order.work_center_id,
            start=order.start,
            end=order.end,
            status=order.status,
        )

    def validate(self) -> List[str]:
        errors: List[str] = []
        if not self.name or not self.name.strip():
            errors.append("Name is required.")
        try:
            WorkOrderStatus(self.status)
        except ValueError:
            errors.append(f"Unknown status: {self.status!r}.")
        start = _optional_date(self.start)
        end = _optional_date(self.end)
        if start is None:
            errors.append("Start date is required.")
        if end is None:
            errors.append("End date is required.")
        if start is not None and end is not None and end <= start:
            errors.append("End date must be after start date.")
        return errors

    def to_data(self) -> WorkOrderData:
        return WorkOrderData.create(
            name=self.name.strip(),
            work_center_id=self.work_center_id,
            status=self.status,
            start=self.start,  # type: ignore[arg-type]
            end=self.end,  # type: ignore[arg-type]
        )


@dataclass
class SubmitResult:
    ok: bool
    order: Optional[WorkOrder] = None
    errors: List[str] = field(default_factory=list)
    conflict: Optional[WorkOrder] = None

    @property
    def message(self) -> str:
        return " ".join(self.errors)


def overlap_message(conflict: WorkOrder) -> str:
    return (
        f'Overlap with "{conflict.name}" '
        f"({conflict.start.isoformat()} to {conflict.end.isoformat()})."
    )


def check_draft(store: OrderStore, draft: WorkOrderDraft, exclude_id: Optional[str] = None) -> SubmitResult:
    """Validate ``draft`` and check it against its work center's schedule."""

    errors = draft.validate()
    if errors:
        return SubmitResult(ok=False, errors=errors)
    data = draft.to_data()
    conflict = store.check_overlap(data.work_center_id, data.start, data.end, exclude_id)
    if conflict is not None:
        return SubmitResult(ok=False, errors=[overlap_message(conflict)], conflict=conflict)
    return SubmitResult(ok=True)


def _optional_date(value: Optional[DateLike]) -> Optional[date]:
    if value is None or value == "":
        return None
    try:
        return coerce_date(value)
    except ValueError:
        return None
