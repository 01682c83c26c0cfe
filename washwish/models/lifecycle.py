"""Order status state machine.

Orders move one step at a time along ORDER_FLOW. ``cancelled`` can be
reached from any status that is not terminal. ``delivered`` and
``cancelled`` accept nothing further.
"""
from enum import Enum
from typing import FrozenSet, List, Optional

from washwish.errors import InvalidTransitionError, ValidationError


class OrderStatus(str, Enum):
    PENDING = "pending"
    PICKED_UP = "picked_up"
    IN_PROCESS = "in_process"
    WASHED = "washed"
    IRONED = "ironed"
    READY_FOR_DELIVERY = "ready_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


ORDER_FLOW: List[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.PICKED_UP,
    OrderStatus.IN_PROCESS,
    OrderStatus.WASHED,
    OrderStatus.IRONED,
    OrderStatus.READY_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset([
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
])

# Statuses counted as "being worked on" in the dashboard stats
IN_PROCESS_STATUSES: FrozenSet[OrderStatus] = frozenset([
    OrderStatus.PICKED_UP,
    OrderStatus.IN_PROCESS,
    OrderStatus.WASHED,
    OrderStatus.IRONED,
])

INITIAL_STATUS: OrderStatus = OrderStatus.PENDING


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status '{value}'", field="status")


def next_status(status: OrderStatus) -> Optional[OrderStatus]:
    """Returns the next status in the linear flow, or None at the end of it."""
    status = OrderStatus(status)
    if status in TERMINAL_STATUSES:
        return None
    return ORDER_FLOW[ORDER_FLOW.index(status) + 1]


def allowed_transitions(status: OrderStatus) -> List[OrderStatus]:
    status = OrderStatus(status)
    if status in TERMINAL_STATUSES:
        return []
    return [next_status(status), OrderStatus.CANCELLED]


def validate_transition(current, requested) -> OrderStatus:
    """Checks ``current -> requested`` and returns the requested status.

    Raises ValidationError for an unknown status name and
    InvalidTransitionError for a move the flow does not permit.
    """
    current = OrderStatus(current)
    requested = parse_status(requested)
    if requested not in allowed_transitions(current):
        raise InvalidTransitionError(current, requested)
    return requested
