from sqlalchemy import Boolean, Column, Enum, ForeignKey, Text

from freight.core.enums import NotificationType
from freight.models.base import BaseModel


class Notification(BaseModel):
    __tablename__ = "notifications"

    receiver_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    match_id = Column(ForeignKey("matches.id"), nullable=True)
    type = Column(Enum(NotificationType), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)

    @classmethod
    def create(cls, receiver_id: int, type: NotificationType, message: str, match_id=None):
        notification = cls(
            receiver_id=receiver_id,
            match_id=match_id,
            type=type,
            message=message,
            is_read=False,
        )
        notification.stamp_created()
        return notification

    def mark_read(self) -> None:
        self.is_read = True
        self.touch()
