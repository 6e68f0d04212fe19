from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from freight.core.enums import PaymentMethod, PaymentStatus


class PaymentCreate(BaseModel):
    match_id: int
    method: Optional[PaymentMethod] = None
    order_no: Optional[str] = None
    amount_type: Optional[str] = None
    pg_ref: Optional[str] = None


class PaymentPrepareIn(BaseModel):
    match_id: int
    amount: int = Field(gt=0)
    order_name: Optional[str] = None


class PaymentPrepareOut(BaseModel):
    payment_id: int
    order_id: str
    amount: int
    order_name: str
    client_key: str


class PaymentConfirmIn(BaseModel):
    payment_key: str = Field(min_length=1)
    order_id: str = Field(min_length=1)
    amount: int


class PaymentOut(BaseModel):
    id: int
    match_id: int
    order_no: Optional[str] = None
    method: PaymentMethod
    status: PaymentStatus
    amount_type: Optional[str] = None
    total_amount: Optional[int] = None
    paid_at: Optional[datetime] = None
    pg_ref: Optional[str] = None
    created_at: datetime
