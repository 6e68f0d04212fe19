from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text

from freight.models.base import BaseModel, utcnow


class Announcement(BaseModel):
    __tablename__ = "announcements"

    admin_id = Column(ForeignKey("users.id"), nullable=False)
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    is_pinned = Column(Boolean, nullable=False, default=False)
    published_at = Column(DateTime(timezone=True), nullable=True)

    @classmethod
    def draft(cls, admin_id: int, title: str, content: str, is_pinned=None) -> "Announcement":
        announcement = cls(
            admin_id=admin_id,
            title=title,
            content=content,
            is_pinned=bool(is_pinned),
            published_at=None,
        )
        announcement.stamp_created()
        return announcement

    def update(self, title=None, content=None, is_pinned=None) -> None:
        if title is not None:
            self.title = title
        if content is not None:
            self.content = content
        if is_pinned is not None:
            self.is_pinned = is_pinned
        self.touch()

    def publish(self) -> None:
        if self.published_at is None:
            self.published_at = utcnow()
        self.touch()

    def unpublish(self) -> None:
        self.published_at = None
        self.touch()
