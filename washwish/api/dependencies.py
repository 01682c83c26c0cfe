import logging

from fastapi import HTTPException, status

from washwish.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PaymentVerificationError,
    ValidationError,
    WashWishError,
)
from washwish.repositories.orders import InMemoryOrderRepository, JsonFileOrderRepository
from washwish.repositories.payments import InMemoryPaymentRepository, JsonFilePaymentRepository
from washwish.services.order_service import OrderService
from washwish.services.payment_service import PaymentService
from washwish.utils.config import Settings

logger = logging.getLogger(__name__)

# Set at application startup
order_service: OrderService | None = None
payment_service: PaymentService | None = None


def build_services(settings: Settings) -> tuple[OrderService, PaymentService]:
    if settings.storage == "json":
        orders = JsonFileOrderRepository(settings.data_dir)
        payments = JsonFilePaymentRepository(settings.data_dir)
    elif settings.storage == "memory":
        orders = InMemoryOrderRepository()
        payments = InMemoryPaymentRepository()
    else:
        raise ValueError(f"Unknown storage backend '{settings.storage}'")
    orders_service = OrderService(orders)
    return orders_service, PaymentService(payments, orders_service, settings.payment_secret)


def init_services(settings: Settings) -> None:
    global order_service, payment_service
    order_service, payment_service = build_services(settings)
    logger.info(f"Order services ready using '{settings.storage}' storage")


def get_order_service() -> OrderService:
    if not order_service:
        raise HTTPException(status_code=503, detail="Order service unavailable")
    return order_service


def get_payment_service() -> PaymentService:
    if not payment_service:
        raise HTTPException(status_code=503, detail="Payment service unavailable")
    return payment_service


def to_http_exception(error: WashWishError, failure_detail: str) -> HTTPException:
    """Maps a core error onto the HTTP status a client should see."""
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": error.message, "field": error.field, "errors": error.details},
        )
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, InvalidTransitionError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(error), "current": error.current, "requested": error.requested},
        )
    if isinstance(error, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(error))
    if isinstance(error, PaymentVerificationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    logger.error(f"{failure_detail}: {error}", exc_info=error)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=failure_detail)
