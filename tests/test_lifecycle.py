from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError

from washwish.errors import InvalidTransitionError, ValidationError
from washwish.models.lifecycle import (
    ORDER_FLOW,
    OrderStatus,
    allowed_transitions,
    next_status,
    validate_transition,
)
from washwish.models.order import Order, OrderItem, StatusHistoryEntry

NOW = datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


def make_order(status=OrderStatus.PENDING):
    return Order(
        id="o-1",
        order_number="WW0001",
        customer_id="C1",
        items=[OrderItem(type="shirt", quantity=2, unit_price=100)],
        order_status=status,
        status_history=[StatusHistoryEntry(status=status, timestamp=NOW, note="Order created")],
        pickup_address="12 MG Road",
        delivery_address="12 MG Road",
        pickup_date=date(2026, 10, 20),
        delivery_date=date(2026, 10, 22),
        created_at=NOW,
        updated_at=NOW,
    )


def test_next_status_follows_linear_flow():
    status = OrderStatus.PENDING
    walked = [status]
    while next_status(status) is not None:
        status = next_status(status)
        walked.append(status)
    assert walked == ORDER_FLOW


@pytest.mark.parametrize("terminal", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
def test_terminal_statuses_allow_nothing(terminal):
    assert allowed_transitions(terminal) == []
    assert next_status(terminal) is None
    with pytest.raises(InvalidTransitionError):
        validate_transition(terminal, OrderStatus.CANCELLED)


def test_skipping_states_is_rejected():
    with pytest.raises(InvalidTransitionError) as exc:
        validate_transition(OrderStatus.PENDING, OrderStatus.DELIVERED)
    assert exc.value.current == "pending"
    assert exc.value.requested == "delivered"


def test_moving_backwards_is_rejected():
    with pytest.raises(InvalidTransitionError):
        validate_transition(OrderStatus.WASHED, OrderStatus.IN_PROCESS)


def test_same_status_is_rejected():
    with pytest.raises(InvalidTransitionError):
        validate_transition(OrderStatus.IRONED, "ironed")


def test_unknown_status_is_a_validation_error():
    with pytest.raises(ValidationError) as exc:
        validate_transition(OrderStatus.PENDING, "lost_in_dryer")
    assert exc.value.field == "status"


@pytest.mark.parametrize("status", ORDER_FLOW[:-1])
def test_cancel_is_reachable_from_every_open_status(status):
    assert validate_transition(status, "cancelled") == OrderStatus.CANCELLED


def test_transition_to_appends_history_and_touches_updated_at():
    order = make_order()
    later = datetime(2026, 10, 20, 8, 0, tzinfo=timezone.utc)

    entry = order.transition_to("picked_up", "collected", at=later)

    assert order.order_status == OrderStatus.PICKED_UP
    assert order.updated_at == later
    assert len(order.status_history) == 2
    assert order.status_history[-1] is entry
    assert entry.status == OrderStatus.PICKED_UP
    assert entry.note == "collected"


def test_rejected_transition_leaves_order_untouched():
    order = make_order()
    before = order.model_dump()

    with pytest.raises(InvalidTransitionError):
        order.transition_to(OrderStatus.IRONED)

    assert order.model_dump() == before


def test_history_entries_are_frozen():
    entry = make_order().status_history[0]
    with pytest.raises(PydanticValidationError):
        entry.note = "rewritten"


def test_totals_are_derived_from_parts():
    order = make_order()
    order.delivery_charge = 100
    order.treatment_charge = 40
    assert order.items[0].line_total == 200
    assert order.subtotal == 200
    assert order.total_amount == 340
