"""Match between a quote and the driver who accepts it.

State machine::

    READY(unaccepted) --accept--> READY(accepted) --start_transit--> IN_TRANSIT
    IN_TRANSIT --complete--> COMPLETED
    READY / IN_TRANSIT --cancel--> CANCELLED

COMPLETED and CANCELLED are terminal. ``driver_id`` and ``accepted_at`` are
written together, once, by ``accept``.
"""
from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, text

from freight.core.enums import MatchStatus
from freight.core.errors import conflict
from freight.models.base import BaseModel, utcnow

ACTIVE_MATCH_PREDICATE = text("status != 'CANCELLED'")


class Match(BaseModel):
    __tablename__ = "matches"
    __table_args__ = (
        # at most one non-cancelled match per quote
        Index(
            "uq_matches_active_quote",
            "quote_id",
            unique=True,
            sqlite_where=ACTIVE_MATCH_PREDICATE,
            postgresql_where=ACTIVE_MATCH_PREDICATE,
        ),
    )

    quote_id = Column(ForeignKey("quotes.id"), nullable=False, index=True)
    driver_id = Column(ForeignKey("users.id"), nullable=True, index=True)
    accepted = Column(Boolean, nullable=False, default=False)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(Enum(MatchStatus), nullable=False, default=MatchStatus.READY)

    @classmethod
    def ready(cls, quote_id: int) -> "Match":
        match = cls(quote_id=quote_id, driver_id=None, accepted=False, status=MatchStatus.READY)
        match.stamp_created()
        return match

    @property
    def is_active(self) -> bool:
        return self.status != MatchStatus.CANCELLED

    def accept(self, driver_id: int) -> None:
        if self.accepted:
            raise conflict("Match has already been accepted.")
        if self.status != MatchStatus.READY:
            raise conflict(f"Match in status {self.status} cannot be accepted.")
        now = utcnow()
        self.driver_id = driver_id
        self.accepted = True
        self.accepted_at = now
        self.touch(now)

    def start_transit(self) -> None:
        if self.status != MatchStatus.READY or not self.accepted:
            raise conflict("Only an accepted match that is ready can start transit.")
        self.status = MatchStatus.IN_TRANSIT
        self.touch()

    def complete(self) -> None:
        if self.status != MatchStatus.IN_TRANSIT:
            raise conflict("Only a match in transit can be completed.")
        self.status = MatchStatus.COMPLETED
        self.touch()

    def cancel(self) -> None:
        if self.status not in (MatchStatus.READY, MatchStatus.IN_TRANSIT):
            raise conflict(f"Match in status {self.status} cannot be cancelled.")
        self.status = MatchStatus.CANCELLED
        self.touch()
