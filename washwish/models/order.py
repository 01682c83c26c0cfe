from pydantic import BaseModel, Field, ConfigDict, computed_field, field_validator, model_validator
from typing import List, Optional
from datetime import date, datetime, timezone
from enum import Enum

from washwish.models.lifecycle import OrderStatus, INITIAL_STATUS, validate_transition


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    ONLINE = "online"
    COD = "cod"


class DeliveryOption(str, Enum):
    REGULAR = "regular"
    EXPRESS = "express"
    SAME_DAY = "same_day"


class SpecialTreatment(str, Enum):
    STAIN_REMOVAL = "stain_removal"
    ODOR_REMOVAL = "odor_removal"
    ANTIBACTERIAL = "antibacterial"
    SANITIZATION = "sanitization"
    WATERPROOFING = "waterproofing"
    WRINKLE_FREE = "wrinkle_free"


class OrderItem(BaseModel):
    """One garment type within an order. The unit price is a snapshot taken at creation."""
    type: str
    quantity: int = Field(..., ge=1)
    unit_price: int = Field(..., ge=0)

    @computed_field
    @property
    def line_total(self) -> int:
        return self.unit_price * self.quantity


class StatusHistoryEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    timestamp: datetime = Field(default_factory=utcnow)
    note: str = ""


class Order(BaseModel):
    id: Optional[str] = None
    order_number: str
    customer_id: str
    items: List[OrderItem] = Field(..., min_length=1)
    delivery_option: DeliveryOption = DeliveryOption.REGULAR
    delivery_charge: int = Field(0, ge=0)
    special_treatments: List[SpecialTreatment] = Field(default_factory=list)
    treatment_charge: int = Field(0, ge=0)
    payment_method: PaymentMethod = PaymentMethod.ONLINE
    payment_status: PaymentStatus = PaymentStatus.PENDING
    order_status: OrderStatus = INITIAL_STATUS
    status_history: List[StatusHistoryEntry] = Field(default_factory=list)
    pickup_address: str
    delivery_address: str
    pickup_date: date
    delivery_date: date
    special_instructions: str = ""
    assigned_staff: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    version: int = 1

    @computed_field
    @property
    def subtotal(self) -> int:
        return sum(item.line_total for item in self.items)

    @computed_field
    @property
    def total_amount(self) -> int:
        return self.subtotal + self.delivery_charge + self.treatment_charge

    def transition_to(self, status, note: str = "", at: Optional[datetime] = None) -> StatusHistoryEntry:
        """Moves the order to ``status`` and records it in the history.

        The transition is checked before anything is touched, so a rejected
        move leaves the order exactly as it was.
        """
        new_status = validate_transition(self.order_status, status)
        entry = StatusHistoryEntry(status=new_status, timestamp=at or utcnow(), note=note or "")
        self.order_status = new_status
        self.status_history.append(entry)
        self.updated_at = entry.timestamp
        return entry

    def to_dict(self):
        return self.model_dump(mode="json")


class OrderItemRequest(BaseModel):
    type: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)

    @field_validator("type")
    @classmethod
    def normalize_type(cls, value: str) -> str:
        return value.strip().lower()


class OrderRequest(BaseModel):
    """Fields a caller supplies to create an order."""
    customer_id: str = Field(..., min_length=1)
    items: List[OrderItemRequest] = Field(..., min_length=1)
    pickup_address: str
    delivery_address: str
    pickup_date: date
    delivery_date: date
    payment_method: PaymentMethod = PaymentMethod.ONLINE
    special_instructions: Optional[str] = ""
    delivery_option: DeliveryOption = DeliveryOption.REGULAR
    special_treatments: List[SpecialTreatment] = Field(default_factory=list)

    @field_validator("special_instructions")
    @classmethod
    def instructions_default(cls, value: Optional[str]) -> str:
        return (value or "").strip()

    @field_validator("pickup_address", "delivery_address")
    @classmethod
    def address_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("address is required")
        return value

    @model_validator(mode="after")
    def check_dates(self):
        if self.pickup_date > self.delivery_date:
            raise ValueError("pickup_date must not be after delivery_date")
        return self


class StatusUpdateRequest(BaseModel):
    status: str
    note: Optional[str] = None


class AssignStaffRequest(BaseModel):
    staff_id: str = Field(..., min_length=1)


class OrderPage(BaseModel):
    orders: List[Order]
    page: int
    limit: int
    total: int
    pages: int


class OrderStats(BaseModel):
    total: int = 0
    pending: int = 0
    in_process: int = 0
    completed: int = 0
    today_orders: int = 0
    total_revenue: int = 0
