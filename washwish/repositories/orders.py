import logging
import re
import threading
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from washwish.errors import ConflictError, StorageFault
from washwish.models.order import Order, OrderStatus, utcnow
from washwish.repositories.storage import Collection, JsonFileCollection, MemoryCollection

logger = logging.getLogger(__name__)

# Identity and the pricing snapshot never change after creation
PROTECTED_FIELDS = frozenset([
    "id",
    "order_number",
    "created_at",
    "version",
    "items",
    "delivery_option",
    "delivery_charge",
    "special_treatments",
    "treatment_charge",
    "subtotal",
    "total_amount",
])

_SEQUENCE_RE = re.compile(r"(\d+)$")


class OrderRepository(ABC):
    """Storage contract for orders.

    Lookups on a missing id return None (or False for delete). Only
    storage failures raise, as StorageFault.
    """

    @abstractmethod
    def create(self, order: Order) -> Order:
        ...

    @abstractmethod
    def find_by_id(self, order_id: str) -> Optional[Order]:
        ...

    @abstractmethod
    def find_by_customer(self, customer_id: str) -> List[Order]:
        ...

    @abstractmethod
    def find_all(self, status: Optional[OrderStatus] = None) -> List[Order]:
        ...

    @abstractmethod
    def update(self, order_id: str, fields: dict, expected_version: Optional[int] = None) -> Optional[Order]:
        ...

    @abstractmethod
    def search(self, query: str) -> List[Order]:
        ...

    @abstractmethod
    def delete(self, order_id: str) -> bool:
        ...

    @abstractmethod
    def count(self) -> int:
        ...

    @abstractmethod
    def next_order_sequence(self) -> int:
        ...


def _newest_first(orders: List[Order]) -> List[Order]:
    return sorted(orders, key=lambda o: (o.created_at, o.order_number), reverse=True)


class CollectionOrderRepository(OrderRepository):
    """OrderRepository over a document Collection."""

    def __init__(self, collection: Collection, clock: Callable = utcnow):
        self._collection = collection
        self._clock = clock
        self._lock = threading.RLock()
        self._last_sequence = 0

    def _load(self) -> Dict[str, Order]:
        documents = self._collection.load()
        try:
            return {order_id: Order.model_validate(doc) for order_id, doc in documents.items()}
        except PydanticValidationError as e:
            logger.error(f"Stored order in '{self._collection.name}' failed validation: {e}")
            raise StorageFault("Stored order data is corrupt") from e

    def _save(self, orders: Dict[str, Order]) -> None:
        self._collection.save({order_id: order.to_dict() for order_id, order in orders.items()})

    def create(self, order: Order) -> Order:
        with self._lock:
            orders = self._load()
            stored = order.model_copy(deep=True)
            if not stored.id:
                stored.id = uuid.uuid4().hex
            if stored.id in orders:
                raise ConflictError(f"Order {stored.id} already exists")
            # Keep a creation time the caller stamped so it matches the first history entry
            if "created_at" not in order.model_fields_set:
                stored.created_at = self._clock()
            stored.updated_at = stored.created_at
            stored.version = 1
            orders[stored.id] = stored
            self._save(orders)
            logger.debug(f"Stored order {stored.id} ({stored.order_number})")
            return stored.model_copy(deep=True)

    def find_by_id(self, order_id: str) -> Optional[Order]:
        return self._load().get(order_id)

    def find_by_customer(self, customer_id: str) -> List[Order]:
        return _newest_first([o for o in self._load().values() if o.customer_id == customer_id])

    def find_all(self, status: Optional[OrderStatus] = None) -> List[Order]:
        orders = self._load().values()
        if status is not None:
            orders = [o for o in orders if o.order_status == OrderStatus(status)]
        return _newest_first(list(orders))

    def update(self, order_id: str, fields: dict, expected_version: Optional[int] = None) -> Optional[Order]:
        with self._lock:
            orders = self._load()
            current = orders.get(order_id)
            if current is None:
                return None
            if expected_version is not None and current.version != expected_version:
                raise ConflictError(
                    f"Order {order_id} was modified concurrently "
                    f"(expected version {expected_version}, found {current.version})"
                )
            ignored = PROTECTED_FIELDS.intersection(fields)
            if ignored:
                logger.warning(f"Ignoring read-only fields {sorted(ignored)} in update of order {order_id}")
            changes = {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}
            merged = current.model_dump()
            merged.update(changes)
            merged["updated_at"] = self._clock()
            merged["version"] = current.version + 1
            updated = Order.model_validate(merged)
            orders[order_id] = updated
            self._save(orders)
            return updated.model_copy(deep=True)

    def search(self, query: str) -> List[Order]:
        needle = (query or "").lower()
        return _newest_first([
            o for o in self._load().values()
            if needle in o.order_number.lower()
            or needle in o.order_status.value
            or needle in o.customer_id.lower()
        ])

    def delete(self, order_id: str) -> bool:
        with self._lock:
            orders = self._load()
            if orders.pop(order_id, None) is None:
                return False
            self._save(orders)
            return True

    def count(self) -> int:
        return len(self._load())

    def next_order_sequence(self) -> int:
        with self._lock:
            highest = self._last_sequence
            for order in self._load().values():
                match = _SEQUENCE_RE.search(order.order_number)
                if match:
                    highest = max(highest, int(match.group(1)))
            self._last_sequence = highest + 1
            return self._last_sequence


class InMemoryOrderRepository(CollectionOrderRepository):
    def __init__(self, clock: Callable = utcnow):
        super().__init__(MemoryCollection("orders"), clock=clock)


class JsonFileOrderRepository(CollectionOrderRepository):
    def __init__(self, data_dir, clock: Callable = utcnow):
        super().__init__(JsonFileCollection(data_dir, "orders"), clock=clock)
