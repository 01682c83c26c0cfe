import os
import sys
from datetime import date, datetime, timedelta, timezone

import pytest

# Adjust import paths
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from washwish.repositories.orders import InMemoryOrderRepository
from washwish.repositories.payments import InMemoryPaymentRepository
from washwish.services.order_service import OrderService
from washwish.services.payment_service import PaymentService

PAYMENT_SECRET = "test_secret"


class FakeClock:
    def __init__(self, now=None):
        self.now = now or datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(clock):
    return InMemoryOrderRepository(clock=clock)


@pytest.fixture
def order_service(repository, clock):
    return OrderService(repository, clock=clock)


@pytest.fixture
def payment_repository(clock):
    return InMemoryPaymentRepository(clock=clock)


@pytest.fixture
def payment_service(payment_repository, order_service, clock):
    return PaymentService(payment_repository, order_service, PAYMENT_SECRET, clock=clock)


@pytest.fixture
def make_payload():
    def _make(**overrides):
        payload = {
            "customer_id": "C1",
            "items": [{"type": "shirt", "quantity": 2}, {"type": "towel", "quantity": 1}],
            "pickup_address": "12 MG Road, Bengaluru",
            "delivery_address": "12 MG Road, Bengaluru",
            "pickup_date": date(2026, 10, 20).isoformat(),
            "delivery_date": date(2026, 10, 22).isoformat(),
            "payment_method": "online",
        }
        payload.update(overrides)
        return payload
    return _make
