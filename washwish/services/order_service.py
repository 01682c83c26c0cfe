"""Order use cases: creation, status changes, queries and dashboard stats."""
import logging
import math
from typing import Callable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from washwish.errors import NotFoundError, ValidationError
from washwish.models.lifecycle import IN_PROCESS_STATUSES, INITIAL_STATUS, OrderStatus, parse_status
from washwish.models.order import (
    Order,
    OrderItem,
    OrderPage,
    OrderRequest,
    OrderStats,
    PaymentStatus,
    StatusHistoryEntry,
    utcnow,
)
from washwish.repositories.orders import OrderRepository
from washwish.services.pricing import compute_item_pricing, compute_order_pricing, unique_treatments

logger = logging.getLogger(__name__)

ORDER_NUMBER_PREFIX = "WW"
CREATED_NOTE = "Order created"


def parse_order_request(data: Union[dict, OrderRequest]) -> OrderRequest:
    """Validates raw creation input, reporting the first offending field."""
    if isinstance(data, OrderRequest):
        return data
    if not isinstance(data, dict):
        raise ValidationError("Order data must be an object")
    try:
        return OrderRequest.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False)
        first = errors[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        details = [
            {"field": ".".join(str(part) for part in err["loc"]) or None, "message": err["msg"]}
            for err in errors
        ]
        raise ValidationError(first["msg"], field=field, details=details) from e


class OrderService:
    def __init__(self, repository: OrderRepository, clock: Callable = utcnow):
        self._repository = repository
        self._clock = clock

    def create_order(self, data: Union[dict, OrderRequest]) -> Order:
        request = parse_order_request(data)
        treatments = unique_treatments(request.special_treatments)
        pricing = compute_order_pricing(request.items, request.delivery_option, treatments)

        items = []
        for item in request.items:
            item_pricing = compute_item_pricing(item.type, item.quantity)
            items.append(OrderItem(type=item.type, quantity=item.quantity, unit_price=item_pricing.unit_price))

        now = self._clock()
        order = Order(
            order_number=f"{ORDER_NUMBER_PREFIX}{self._repository.next_order_sequence():04d}",
            customer_id=request.customer_id,
            items=items,
            delivery_option=request.delivery_option,
            delivery_charge=pricing.delivery_charge,
            special_treatments=treatments,
            treatment_charge=pricing.treatment_charge,
            payment_method=request.payment_method,
            payment_status=PaymentStatus.PENDING,
            order_status=INITIAL_STATUS,
            status_history=[StatusHistoryEntry(status=INITIAL_STATUS, timestamp=now, note=CREATED_NOTE)],
            pickup_address=request.pickup_address,
            delivery_address=request.delivery_address,
            pickup_date=request.pickup_date,
            delivery_date=request.delivery_date,
            special_instructions=request.special_instructions,
            created_at=now,
            updated_at=now,
        )
        stored = self._repository.create(order)
        logger.info(
            f"Created order {stored.order_number} ({stored.id}) for customer {stored.customer_id}, "
            f"total {stored.total_amount}"
        )
        return stored

    def get_order(self, order_id: str) -> Order:
        order = self._repository.find_by_id(order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def update_order_status(self, order_id: str, new_status, note: Optional[str] = None) -> Order:
        order = self.get_order(order_id)
        previous = order.order_status
        order.transition_to(new_status, note or "", at=self._clock())
        updated = self._repository.update(
            order_id,
            {"order_status": order.order_status, "status_history": order.status_history},
            expected_version=order.version,
        )
        if updated is None:
            raise NotFoundError("Order", order_id)
        logger.info(f"Order {updated.order_number} moved from {previous.value} to {updated.order_status.value}")
        return updated

    def cancel_order(self, order_id: str, note: Optional[str] = None) -> Order:
        return self.update_order_status(order_id, OrderStatus.CANCELLED, note or "Order cancelled")

    def assign_staff(self, order_id: str, staff_id: str) -> Order:
        if not staff_id or not staff_id.strip():
            raise ValidationError("Staff id is required", field="staff_id")
        order = self.get_order(order_id)
        updated = self._repository.update(
            order_id, {"assigned_staff": staff_id.strip()}, expected_version=order.version
        )
        if updated is None:
            raise NotFoundError("Order", order_id)
        logger.info(f"Assigned staff {updated.assigned_staff} to order {updated.order_number}")
        return updated

    def update_payment_status(self, order_id: str, payment_status) -> Order:
        try:
            payment_status = PaymentStatus(payment_status)
        except ValueError:
            raise ValidationError(f"Invalid payment status '{payment_status}'", field="payment_status")
        order = self.get_order(order_id)
        updated = self._repository.update(
            order_id, {"payment_status": payment_status}, expected_version=order.version
        )
        if updated is None:
            raise NotFoundError("Order", order_id)
        logger.info(f"Order {updated.order_number} payment status is now {payment_status.value}")
        return updated

    def delete_order(self, order_id: str) -> None:
        if not self._repository.delete(order_id):
            raise NotFoundError("Order", order_id)
        logger.info(f"Deleted order {order_id}")

    def get_orders_by_customer(self, customer_id: str) -> List[Order]:
        return self._repository.find_by_customer(customer_id)

    def search_orders(self, query: str) -> List[Order]:
        return self._repository.search(query)

    def list_orders(self, status=None, page: int = 1, limit: int = 10) -> OrderPage:
        if page < 1:
            raise ValidationError("Page must be at least 1", field="page")
        if limit < 1:
            raise ValidationError("Limit must be at least 1", field="limit")
        if status is not None:
            status = parse_status(status)
        orders = self._repository.find_all(status)
        start = (page - 1) * limit
        return OrderPage(
            orders=orders[start:start + limit],
            page=page,
            limit=limit,
            total=len(orders),
            pages=math.ceil(len(orders) / limit),
        )

    def get_order_stats(self) -> OrderStats:
        orders = self._repository.find_all()
        today = self._clock().date()
        return OrderStats(
            total=len(orders),
            pending=sum(1 for o in orders if o.order_status == OrderStatus.PENDING),
            in_process=sum(1 for o in orders if o.order_status in IN_PROCESS_STATUSES),
            completed=sum(1 for o in orders if o.order_status == OrderStatus.DELIVERED),
            today_orders=sum(1 for o in orders if o.created_at.date() == today),
            total_revenue=sum(o.total_amount for o in orders if o.payment_status == PaymentStatus.PAID),
        )
