from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel(Base):
    """Common id and timestamps.

    Timestamps are stamped explicitly: factory classmethods on the models
    set ``created_at`` and mutating methods call ``touch()``.
    """
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=True)

    def stamp_created(self, now: datetime | None = None) -> None:
        self.created_at = now or utcnow()
        self.updated_at = self.created_at

    def touch(self, now: datetime | None = None) -> None:
        self.updated_at = now or utcnow()
