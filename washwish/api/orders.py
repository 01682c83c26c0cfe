import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from washwish.api.dependencies import get_order_service, to_http_exception
from washwish.errors import WashWishError
from washwish.models.order import AssignStaffRequest, Order, OrderPage, OrderStats, StatusUpdateRequest
from washwish.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=Order, status_code=status.HTTP_201_CREATED)
def create_order(order_data: Dict, service: OrderService = Depends(get_order_service)):
    """Prices and stores a new order in the pending state."""
    try:
        return service.create_order(order_data)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to create order")
    except Exception as e:
        logger.error(f"Error creating order: {str(e)}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create order")


@router.get("", response_model=OrderPage)
def list_orders(
    status_filter: Optional[str] = Query(None, alias="status"),
    page: int = 1,
    limit: int = 10,
    service: OrderService = Depends(get_order_service),
):
    try:
        return service.list_orders(status=status_filter, page=page, limit=limit)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to list orders")


@router.get("/search", response_model=List[Order])
def search_orders(q: str = "", service: OrderService = Depends(get_order_service)):
    try:
        return service.search_orders(q)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to search orders")


@router.get("/stats", response_model=OrderStats)
def get_order_stats(service: OrderService = Depends(get_order_service)):
    try:
        return service.get_order_stats()
    except WashWishError as e:
        raise to_http_exception(e, "Failed to compute order stats")


@router.get("/customer/{customer_id}", response_model=List[Order])
def get_customer_orders(customer_id: str, service: OrderService = Depends(get_order_service)):
    try:
        return service.get_orders_by_customer(customer_id)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to load customer orders")


@router.get("/{order_id}", response_model=Order)
def get_order(order_id: str, service: OrderService = Depends(get_order_service)):
    try:
        return service.get_order(order_id)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to load order")


@router.put("/{order_id}/status", response_model=Order)
def update_order_status(
    order_id: str,
    request: StatusUpdateRequest,
    service: OrderService = Depends(get_order_service),
):
    try:
        return service.update_order_status(order_id, request.status, request.note)
    except WashWishError as e:
        logger.warning(f"Status update to '{request.status}' rejected for order {order_id}: {e}")
        raise to_http_exception(e, "Failed to update order status")


@router.put("/{order_id}/assign", response_model=Order)
def assign_staff(
    order_id: str,
    request: AssignStaffRequest,
    service: OrderService = Depends(get_order_service),
):
    try:
        return service.assign_staff(order_id, request.staff_id)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to assign staff")


@router.delete("/{order_id}")
def delete_order(order_id: str, service: OrderService = Depends(get_order_service)):
    try:
        service.delete_order(order_id)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to delete order")
    return {"message": "Order deleted successfully"}
