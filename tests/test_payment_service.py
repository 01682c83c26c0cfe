import pytest

from washwish.errors import NotFoundError, PaymentVerificationError, ValidationError
from washwish.models.order import PaymentStatus
from washwish.models.payment import PaymentRecordStatus


@pytest.fixture
def order(order_service, make_payload):
    return order_service.create_order(make_payload())


def test_payment_order_charges_order_total(payment_service, order):
    payment = payment_service.create_payment_order(order.id)
    assert payment.id
    assert payment.amount == order.total_amount == 280
    assert payment.currency == "INR"
    assert payment.status == PaymentRecordStatus.CREATED
    assert payment.gateway_order_id.startswith("order_")


def test_payment_order_for_unknown_order(payment_service):
    with pytest.raises(NotFoundError):
        payment_service.create_payment_order("missing")


def test_signed_checkout_marks_order_paid(payment_service, order_service, order, clock):
    payment = payment_service.create_payment_order(order.id)
    checkout = payment_service.simulate_checkout(payment.gateway_order_id)

    verified = payment_service.verify_payment(**checkout)

    assert verified.status == PaymentRecordStatus.PAID
    assert verified.paid_at == clock.now
    assert verified.gateway_payment_id == checkout["gateway_payment_id"]
    assert order_service.get_order(order.id).payment_status == PaymentStatus.PAID
    assert order_service.get_order_stats().total_revenue == 280


def test_signature_mismatch_fails_payment(payment_service, order_service, payment_repository, order):
    payment = payment_service.create_payment_order(order.id)

    with pytest.raises(PaymentVerificationError):
        payment_service.verify_payment(payment.gateway_order_id, "pay_forged", "0" * 64)

    assert payment_repository.find_by_id(payment.id).status == PaymentRecordStatus.FAILED
    assert order_service.get_order(order.id).payment_status == PaymentStatus.FAILED
    assert order_service.get_order_stats().total_revenue == 0


def test_signature_depends_on_secret(payment_service):
    assert payment_service.sign("order_a", "pay_b") == payment_service.sign("order_a", "pay_b")
    assert payment_service.sign("order_a", "pay_b") != payment_service.sign("order_a", "pay_c")


def test_payment_cannot_be_verified_twice(payment_service, order):
    payment = payment_service.create_payment_order(order.id)
    checkout = payment_service.simulate_checkout(payment.gateway_order_id)
    payment_service.verify_payment(**checkout)

    with pytest.raises(ValidationError):
        payment_service.verify_payment(**checkout)


def test_paid_order_rejects_new_payment(payment_service, order):
    payment = payment_service.create_payment_order(order.id)
    payment_service.verify_payment(**payment_service.simulate_checkout(payment.gateway_order_id))

    with pytest.raises(ValidationError):
        payment_service.create_payment_order(order.id)


def test_verify_unknown_gateway_order(payment_service):
    with pytest.raises(NotFoundError):
        payment_service.verify_payment("order_missing", "pay_x", "sig")


def test_refund(payment_service, order_service, order):
    payment = payment_service.create_payment_order(order.id)
    with pytest.raises(ValidationError):
        payment_service.refund_payment(payment.id, "not paid yet")

    payment_service.verify_payment(**payment_service.simulate_checkout(payment.gateway_order_id))
    refunded = payment_service.refund_payment(payment.id, "shirt was lost")

    assert refunded.status == PaymentRecordStatus.REFUNDED
    assert refunded.refund_reason == "shirt was lost"
    assert order_service.get_order(order.id).payment_status == PaymentStatus.REFUNDED
    with pytest.raises(NotFoundError):
        payment_service.refund_payment("missing", "x")


def test_payment_stats(payment_service, order_service, make_payload, clock):
    first = order_service.create_order(make_payload())
    second = order_service.create_order(make_payload(customer_id="C2"))
    paid = payment_service.create_payment_order(first.id)
    payment_service.verify_payment(**payment_service.simulate_checkout(paid.gateway_order_id))
    payment_service.create_payment_order(second.id)

    stats = payment_service.get_payment_stats()
    assert stats.total == 2
    assert stats.paid == 1
    assert stats.pending == 1
    assert stats.failed == 0
    assert stats.today_revenue == 280
    assert stats.total_revenue == 280

    clock.advance(days=1)
    assert payment_service.get_payment_stats().today_revenue == 0
    assert [p.order_id for p in payment_service.get_payments_by_customer("C2")] == [second.id]


def test_new_attempt_expires_open_one(payment_service, payment_repository, order_service, order):
    first = payment_service.create_payment_order(order.id)
    second = payment_service.create_payment_order(order.id)

    assert payment_repository.find_by_id(first.id).status == PaymentRecordStatus.FAILED
    payment_service.verify_payment(**payment_service.simulate_checkout(second.gateway_order_id))

    with pytest.raises(ValidationError):
        payment_service.verify_payment(first.gateway_order_id, "pay_forged", "0" * 64)
    assert order_service.get_order(order.id).payment_status == PaymentStatus.PAID
    assert order_service.get_order_stats().total_revenue == 280


def test_forged_attempt_on_paid_order_leaves_it_paid(payment_service, payment_repository, order_service, order):
    payment = payment_service.create_payment_order(order.id)
    order_service.update_payment_status(order.id, "paid")

    with pytest.raises(ValidationError):
        payment_service.verify_payment(payment.gateway_order_id, "pay_forged", "0" * 64)

    assert order_service.get_order(order.id).payment_status == PaymentStatus.PAID
    assert payment_repository.find_by_id(payment.id).status == PaymentRecordStatus.CREATED
    assert order_service.get_order_stats().total_revenue == 280


def test_signed_attempt_on_paid_order_is_not_counted_twice(payment_service, order_service, order):
    payment = payment_service.create_payment_order(order.id)
    order_service.update_payment_status(order.id, "paid")

    with pytest.raises(ValidationError) as exc:
        payment_service.verify_payment(**payment_service.simulate_checkout(payment.gateway_order_id))

    assert exc.value.message == "Payment already completed for this order"
    stats = payment_service.get_payment_stats()
    assert stats.paid == 0
    assert stats.total_revenue == 0


def test_cancelled_order_cannot_be_paid(payment_service, order_service, order):
    order_service.cancel_order(order.id)
    with pytest.raises(ValidationError):
        payment_service.create_payment_order(order.id)


def test_order_cancelled_during_checkout_is_not_paid(payment_service, order_service, order):
    payment = payment_service.create_payment_order(order.id)
    order_service.cancel_order(order.id)

    with pytest.raises(ValidationError):
        payment_service.verify_payment(**payment_service.simulate_checkout(payment.gateway_order_id))

    assert order_service.get_order(order.id).payment_status == PaymentStatus.PENDING
    assert order_service.get_order_stats().total_revenue == 0
