"""Simulated online payment gateway.

Gateway responses are signed with HMAC-SHA256 over
``"<gateway_order_id>|<gateway_payment_id>"`` so a client can only
confirm a payment it was actually given a signature for.
"""
import hashlib
import hmac
import logging
import secrets
from typing import Callable, List

from washwish.errors import NotFoundError, PaymentVerificationError, ValidationError
from washwish.models.lifecycle import OrderStatus
from washwish.models.order import PaymentMethod, PaymentStatus, utcnow
from washwish.models.payment import Payment, PaymentRecordStatus, PaymentStats
from washwish.repositories.payments import PaymentRepository
from washwish.services.order_service import OrderService

logger = logging.getLogger(__name__)


class PaymentService:
    def __init__(
        self,
        repository: PaymentRepository,
        order_service: OrderService,
        secret: str,
        clock: Callable = utcnow,
    ):
        self._repository = repository
        self._orders = order_service
        self._secret = secret.encode("utf-8")
        self._clock = clock

    def sign(self, gateway_order_id: str, gateway_payment_id: str) -> str:
        message = f"{gateway_order_id}|{gateway_payment_id}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def _check_payable(self, order, field: str) -> None:
        if order.payment_status == PaymentStatus.PAID:
            raise ValidationError("Payment already completed for this order", field=field)
        if order.order_status == OrderStatus.CANCELLED:
            raise ValidationError("Cancelled orders cannot be paid", field=field)

    def create_payment_order(self, order_id: str) -> Payment:
        order = self._orders.get_order(order_id)
        self._check_payable(order, "order_id")
        # One live attempt per order: older open attempts can no longer be verified
        for stale in self._repository.find_by_order(order.id):
            if stale.status == PaymentRecordStatus.CREATED:
                self._repository.update(stale.id, {
                    "status": PaymentRecordStatus.FAILED,
                    "failure_reason": "Superseded by a newer payment attempt",
                })
                logger.info(f"Expired payment {stale.id} for order {order.order_number}")
        payment = self._repository.create(Payment(
            order_id=order.id,
            customer_id=order.customer_id,
            amount=order.total_amount,
            method=PaymentMethod.ONLINE,
            gateway_order_id=f"order_{secrets.token_hex(8)}",
        ))
        logger.info(f"Created payment {payment.id} for order {order.order_number}, amount {payment.amount}")
        return payment

    def simulate_checkout(self, gateway_order_id: str) -> dict:
        """Plays the gateway's part: issues a payment id and its signature."""
        payment = self._repository.find_by_gateway_order(gateway_order_id)
        if payment is None:
            raise NotFoundError("Payment", gateway_order_id)
        gateway_payment_id = f"pay_{secrets.token_hex(8)}"
        return {
            "gateway_order_id": gateway_order_id,
            "gateway_payment_id": gateway_payment_id,
            "signature": self.sign(gateway_order_id, gateway_payment_id),
        }

    def verify_payment(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> Payment:
        payment = self._repository.find_by_gateway_order(gateway_order_id)
        if payment is None:
            raise NotFoundError("Payment", gateway_order_id)
        if payment.status != PaymentRecordStatus.CREATED:
            raise ValidationError(f"Payment is already {payment.status.value}", field="gateway_order_id")
        # The order may have been paid or cancelled since this attempt was opened
        self._check_payable(self._orders.get_order(payment.order_id), "gateway_order_id")

        expected = self.sign(gateway_order_id, gateway_payment_id)
        if not hmac.compare_digest(expected, signature or ""):
            self._repository.update(payment.id, {
                "status": PaymentRecordStatus.FAILED,
                "gateway_payment_id": gateway_payment_id,
                "failure_reason": "Signature mismatch",
            })
            self._orders.update_payment_status(payment.order_id, PaymentStatus.FAILED)
            logger.warning(f"Payment verification failed for {gateway_order_id}")
            raise PaymentVerificationError("Payment verification failed")

        updated = self._repository.update(payment.id, {
            "status": PaymentRecordStatus.PAID,
            "gateway_payment_id": gateway_payment_id,
            "signature": signature,
            "paid_at": self._clock(),
        })
        self._orders.update_payment_status(payment.order_id, PaymentStatus.PAID)
        logger.info(f"Payment {payment.id} verified for order {payment.order_id}")
        return updated

    def refund_payment(self, payment_id: str, reason: str) -> Payment:
        payment = self._repository.find_by_id(payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        if payment.status != PaymentRecordStatus.PAID:
            raise ValidationError("Only paid payments can be refunded", field="payment_id")
        updated = self._repository.update(payment_id, {
            "status": PaymentRecordStatus.REFUNDED,
            "refund_reason": reason,
        })
        self._orders.update_payment_status(payment.order_id, PaymentStatus.REFUNDED)
        logger.info(f"Refunded payment {payment_id}: {reason}")
        return updated

    def get_payments_by_customer(self, customer_id: str) -> List[Payment]:
        return self._repository.find_by_customer(customer_id)

    def get_payment_stats(self) -> PaymentStats:
        payments = self._repository.find_all()
        today = self._clock().date()
        paid = [p for p in payments if p.status == PaymentRecordStatus.PAID]
        return PaymentStats(
            total=len(payments),
            paid=len(paid),
            pending=sum(1 for p in payments if p.status == PaymentRecordStatus.CREATED),
            failed=sum(1 for p in payments if p.status == PaymentRecordStatus.FAILED),
            today_revenue=sum(p.amount for p in paid if p.paid_at and p.paid_at.date() == today),
            total_revenue=sum(p.amount for p in paid),
        )
