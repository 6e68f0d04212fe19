from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from freight.core.enums import NotificationType


class NotificationOut(BaseModel):
    id: int
    match_id: Optional[int] = None
    type: NotificationType
    message: str
    is_read: bool
    created_at: datetime


class UnreadCountOut(BaseModel):
    unread_count: int
