from pydantic import BaseModel, Field
from enum import Enum
from datetime import datetime
from typing import Optional

from washwish.models.order import PaymentMethod, utcnow


class PaymentRecordStatus(str, Enum):
    CREATED = "created"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class Payment(BaseModel):
    id: Optional[str] = None
    order_id: str
    customer_id: str
    amount: int = Field(..., ge=0)
    currency: str = "INR"
    method: PaymentMethod = PaymentMethod.ONLINE
    status: PaymentRecordStatus = PaymentRecordStatus.CREATED
    gateway_order_id: str
    gateway_payment_id: Optional[str] = None
    signature: Optional[str] = None
    failure_reason: Optional[str] = None
    refund_reason: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_dict(self):
        return self.model_dump(mode="json")


class PaymentOrderRequest(BaseModel):
    order_id: str = Field(..., min_length=1)


class PaymentVerifyRequest(BaseModel):
    gateway_order_id: str
    gateway_payment_id: str
    signature: str


class PaymentActionRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=500)


class PaymentStats(BaseModel):
    total: int = 0
    paid: int = 0
    pending: int = 0
    failed: int = 0
    today_revenue: int = 0
    total_revenue: int = 0
