from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from freight.core.enums import MatchStatus


class MatchCreate(BaseModel):
    quote_id: int


class MatchOut(BaseModel):
    id: int
    quote_id: int
    driver_id: Optional[int] = None
    accepted: bool
    accepted_at: Optional[datetime] = None
    status: MatchStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
