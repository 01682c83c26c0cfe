import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from washwish.api.dependencies import get_payment_service, to_http_exception
from washwish.errors import WashWishError
from washwish.models.payment import (
    Payment,
    PaymentActionRequest,
    PaymentOrderRequest,
    PaymentStats,
    PaymentVerifyRequest,
)
from washwish.services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter()


class CheckoutRequest(BaseModel):
    gateway_order_id: str


@router.post("/create-order", response_model=Payment, status_code=status.HTTP_201_CREATED)
def create_payment_order(request: PaymentOrderRequest, service: PaymentService = Depends(get_payment_service)):
    try:
        return service.create_payment_order(request.order_id)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to create payment order")
    except Exception as e:
        logger.error(f"Error creating payment for order {request.order_id}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create payment order"
        )


@router.post("/checkout")
def simulate_checkout(request: CheckoutRequest, service: PaymentService = Depends(get_payment_service)):
    """Stands in for the hosted gateway page and returns a signed result."""
    try:
        return service.simulate_checkout(request.gateway_order_id)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to simulate checkout")


@router.post("/verify", response_model=Payment)
def verify_payment(request: PaymentVerifyRequest, service: PaymentService = Depends(get_payment_service)):
    try:
        return service.verify_payment(request.gateway_order_id, request.gateway_payment_id, request.signature)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to verify payment")


@router.post("/{payment_id}/refund", response_model=Payment)
def refund_payment(
    payment_id: str,
    request: PaymentActionRequest,
    service: PaymentService = Depends(get_payment_service),
):
    try:
        return service.refund_payment(payment_id, request.reason)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to refund payment")


@router.get("/stats", response_model=PaymentStats)
def get_payment_stats(service: PaymentService = Depends(get_payment_service)):
    try:
        return service.get_payment_stats()
    except WashWishError as e:
        raise to_http_exception(e, "Failed to compute payment stats")


@router.get("/customer/{customer_id}", response_model=List[Payment])
def get_customer_payments(customer_id: str, service: PaymentService = Depends(get_payment_service)):
    try:
        return service.get_payments_by_customer(customer_id)
    except WashWishError as e:
        raise to_http_exception(e, "Failed to load customer payments")
