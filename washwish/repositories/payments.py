import logging
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from washwish.errors import StorageFault
from washwish.models.order import utcnow
from washwish.models.payment import Payment
from washwish.repositories.storage import Collection, JsonFileCollection, MemoryCollection

logger = logging.getLogger(__name__)


class PaymentRepository(ABC):
    @abstractmethod
    def create(self, payment: Payment) -> Payment:
        ...

    @abstractmethod
    def find_by_id(self, payment_id: str) -> Optional[Payment]:
        ...

    @abstractmethod
    def find_by_gateway_order(self, gateway_order_id: str) -> Optional[Payment]:
        ...

    @abstractmethod
    def find_by_order(self, order_id: str) -> List[Payment]:
        ...

    @abstractmethod
    def find_by_customer(self, customer_id: str) -> List[Payment]:
        ...

    @abstractmethod
    def find_all(self) -> List[Payment]:
        ...

    @abstractmethod
    def update(self, payment_id: str, fields: dict) -> Optional[Payment]:
        ...


class CollectionPaymentRepository(PaymentRepository):
    def __init__(self, collection: Collection, clock: Callable = utcnow):
        self._collection = collection
        self._clock = clock
        self._lock = threading.RLock()

    def _load(self) -> Dict[str, Payment]:
        try:
            return {pid: Payment.model_validate(doc) for pid, doc in self._collection.load().items()}
        except PydanticValidationError as e:
            logger.error(f"Stored payment in '{self._collection.name}' failed validation: {e}")
            raise StorageFault("Stored payment data is corrupt") from e

    def _save(self, payments: Dict[str, Payment]) -> None:
        self._collection.save({pid: p.to_dict() for pid, p in payments.items()})

    def create(self, payment: Payment) -> Payment:
        with self._lock:
            payments = self._load()
            stored = payment.model_copy(deep=True)
            stored.id = stored.id or uuid.uuid4().hex
            stored.created_at = stored.updated_at = self._clock()
            payments[stored.id] = stored
            self._save(payments)
            return stored.model_copy(deep=True)

    def find_by_id(self, payment_id: str) -> Optional[Payment]:
        return self._load().get(payment_id)

    def find_by_gateway_order(self, gateway_order_id: str) -> Optional[Payment]:
        return next((p for p in self._load().values() if p.gateway_order_id == gateway_order_id), None)

    def find_by_order(self, order_id: str) -> List[Payment]:
        return [p for p in self.find_all() if p.order_id == order_id]

    def find_by_customer(self, customer_id: str) -> List[Payment]:
        return [p for p in self.find_all() if p.customer_id == customer_id]

    def find_all(self) -> List[Payment]:
        return sorted(self._load().values(), key=lambda p: p.created_at, reverse=True)

    def update(self, payment_id: str, fields: dict) -> Optional[Payment]:
        with self._lock:
            payments = self._load()
            current = payments.get(payment_id)
            if current is None:
                return None
            merged = current.model_dump()
            merged.update({k: v for k, v in fields.items() if k not in ("id", "created_at")})
            merged["updated_at"] = self._clock()
            updated = Payment.model_validate(merged)
            payments[payment_id] = updated
            self._save(payments)
            return updated.model_copy(deep=True)


class InMemoryPaymentRepository(CollectionPaymentRepository):
    def __init__(self, clock: Callable = utcnow):
        super().__init__(MemoryCollection("payments"), clock=clock)


class JsonFilePaymentRepository(CollectionPaymentRepository):
    def __init__(self, data_dir, clock: Callable = utcnow):
        super().__init__(JsonFileCollection(data_dir, "payments"), clock=clock)
