from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, Text

from freight.core.enums import CounterOfferStatus
from freight.core.errors import conflict
from freight.models.base import BaseModel, utcnow


class CounterOffer(BaseModel):
    __tablename__ = "counter_offers"

    quote_id = Column(ForeignKey("quotes.id"), nullable=False, index=True)
    driver_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    proposed_price = Column(Integer, nullable=False)
    message = Column(Text)
    status = Column(Enum(CounterOfferStatus), nullable=False, default=CounterOfferStatus.PENDING)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    @classmethod
    def pending(cls, quote_id: int, driver_id: int, proposed_price: int, message=None) -> "CounterOffer":
        offer = cls(
            quote_id=quote_id,
            driver_id=driver_id,
            proposed_price=proposed_price,
            message=message,
            status=CounterOfferStatus.PENDING,
        )
        offer.stamp_created()
        return offer

    def _respond(self, status: CounterOfferStatus) -> None:
        if self.status != CounterOfferStatus.PENDING:
            raise conflict("Counter offer has already been answered.")
        now = utcnow()
        self.status = status
        self.responded_at = now
        self.touch(now)

    def accept(self) -> None:
        self._respond(CounterOfferStatus.ACCEPTED)

    def reject(self) -> None:
        self._respond(CounterOfferStatus.REJECTED)
