from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String

from freight.core.enums import PaymentMethod, PaymentStatus
from freight.core.errors import conflict
from freight.models.base import BaseModel, utcnow


class Payment(BaseModel):
    """Payment for one match.

    For processor payments ``order_no`` holds the order id sent to the
    payment window and ``pg_ref`` the processor's payment key once approved.
    """
    __tablename__ = "payments"

    match_id = Column(ForeignKey("matches.id"), nullable=False, index=True)
    order_no = Column(String(100), unique=True, index=True)
    method = Column(Enum(PaymentMethod), nullable=False, default=PaymentMethod.CARD)
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)
    amount_type = Column(String(50))
    total_amount = Column(Integer)
    paid_at = Column(DateTime(timezone=True))
    pg_ref = Column(String(100))

    @classmethod
    def pending(cls, match_id: int, order_no: str, method=PaymentMethod.CARD, **fields) -> "Payment":
        payment = cls(
            match_id=match_id,
            order_no=order_no,
            method=method,
            status=PaymentStatus.PENDING,
            **fields,
        )
        payment.stamp_created()
        return payment

    def _ensure_pending(self) -> None:
        if self.status != PaymentStatus.PENDING:
            raise conflict(f"Payment is already {self.status}.")

    def complete(self, paid_at=None, payment_key=None) -> None:
        self._ensure_pending()
        self.status = PaymentStatus.COMPLETED
        self.paid_at = paid_at or utcnow()
        if payment_key and payment_key.strip():
            self.pg_ref = payment_key
        self.touch()

    def fail(self) -> None:
        self._ensure_pending()
        self.status = PaymentStatus.FAILED
        self.touch()
