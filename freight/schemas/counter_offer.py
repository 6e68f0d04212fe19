from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from freight.core.enums import CounterOfferStatus


class CounterOfferCreate(BaseModel):
    proposed_price: int = Field(gt=0)
    message: Optional[str] = Field(default=None, max_length=1000)


class CounterOfferOut(BaseModel):
    id: int
    quote_id: int
    driver_id: int
    proposed_price: int
    message: Optional[str] = None
    status: CounterOfferStatus
    created_at: datetime
    responded_at: Optional[datetime] = None
