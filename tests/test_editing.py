from __future__ import annotations

from datetime import date

import pytest

from workorder_timeline.editing import WorkOrderDraft, check_draft, overlap_message
from workorder_timeline.interaction import CreateRequest
from workorder_timeline.models import WorkCenter, WorkOrder, WorkOrderStatus
from workorder_timeline.persistence import InMemoryBackend
from workorder_timeline.repository import OrderRepository
from workorder_timeline.store import OrderStore

HOUSING = WorkOrder("wo-1", "Housing", "wc-1", WorkOrderStatus.OPEN, date(2026, 1, 1), date(2026, 1, 5))


@pytest.fixture
def backend() -> InMemoryBackend:
    return InMemoryBackend(orders=[HOUSING], work_centers=[WorkCenter("wc-1", "Extrusion Line A")])


@pytest.fixture
def repository(backend) -> OrderRepository:
    repository = OrderRepository(OrderStore(), backend)
    repository.load()
    return repository


def test_create_draft_defaults_to_one_week() -> None:
    draft = WorkOrderDraft.for_create(CreateRequest("wc-1", date(2026, 2, 2)))

    assert draft.start == date(2026, 2, 2)
    assert draft.end == date(2026, 2, 9)
    assert draft.status is WorkOrderStatus.OPEN


@pytest.mark.parametrize(
    "draft, message",
    [
        (WorkOrderDraft("", "wc-1", "2026-02-01", "2026-02-03"), "Name is required."),
        (WorkOrderDraft("A", "wc-1", "2026-02-03", "2026-02-03"), "End date must be after start date."),
        (WorkOrderDraft("A", "wc-1", "2026-02-05", "2026-02-03"), "End date must be after start date."),
        (WorkOrderDraft("A", "wc-1", None, "2026-02-03"), "Start date is required."),
        (WorkOrderDraft("A", "wc-1", "2026-02-01", ""), "End date is required."),
        (WorkOrderDraft("A", "wc-1", "2026-02-01", "2026-02-03", "paused"), "Unknown status: 'paused'."),
    ],
)
def test_validation_messages(draft: WorkOrderDraft, message: str) -> None:
    assert message in draft.validate()


def test_check_draft_does_not_write(repository) -> None:
    result = check_draft(repository.store, WorkOrderDraft("Bracket", "wc-1", "2026-01-05", "2026-01-10"))

    assert result.ok
    assert result.order is None
    assert len(repository.store) == 1


def test_submit_create_adds_and_persists_valid_order(repository, backend) -> None:
    result = repository.submit_create(WorkOrderDraft("  Bracket ", "wc-1", "2026-01-05", "2026-01-10", "blocked"))

    assert result.ok
    assert result.order is not None
    assert result.order.name == "Bracket"
    assert result.order.status is WorkOrderStatus.BLOCKED
    assert repository.store.get(result.order.id) == result.order
    assert result.order.id in {order.id for order in backend.list_orders()}


def test_submit_create_reports_conflict(repository, backend) -> None:
    result = repository.submit_create(WorkOrderDraft("Bracket", "wc-1", "2026-01-04", "2026-01-06"))

    assert not result.ok
    assert result.conflict == HOUSING
    assert result.message == 'Overlap with "Housing" (2026-01-01 to 2026-01-05).'
    assert len(repository.store) == 1
    assert backend.list_orders() == [HOUSING]


def test_submit_create_does_not_raise_on_invalid_range(repository) -> None:
    result = repository.submit_create(WorkOrderDraft("Bracket", "wc-1", "2026-03-05", "2026-03-01"))

    assert not result.ok
    assert result.errors == ["End date must be after start date."]
    assert result.conflict is None


def test_submit_edit_excludes_the_edited_order(repository, backend) -> None:
    draft = WorkOrderDraft.for_edit(HOUSING)
    draft.end = date(2026, 1, 8)

    result = repository.submit_edit(HOUSING.id, draft)

    assert result.ok
    assert repository.store.get(HOUSING.id).end == date(2026, 1, 8)
    assert backend.list_orders()[0].end == date(2026, 1, 8)


def test_submit_edit_of_deleted_order_is_noop(repository) -> None:
    draft = WorkOrderDraft.for_edit(HOUSING)
    repository.delete(HOUSING.id)

    result = repository.submit_edit(HOUSING.id, draft)

    assert result.ok
    assert result.order is None
    assert len(repository.store) == 0


def test_overlap_message_format() -> None:
    assert overlap_message(HOUSING) == 'Overlap with "Housing" (2026-01-01 to 2026-01-05).'
