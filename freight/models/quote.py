from sqlalchemy import Boolean, Column, Enum, Float, ForeignKey, Integer, Numeric, String, Text

from freight.core.enums import LoadHandlingMethod, QuoteStatus
from freight.models.base import BaseModel


class Quote(BaseModel):
    __tablename__ = "quotes"

    shipper_id = Column(ForeignKey("users.id"), nullable=False, index=True)

    origin_address = Column(String(255), nullable=False)
    destination_address = Column(String(255), nullable=False)
    origin_lat = Column(Float)
    origin_lng = Column(Float)
    destination_lat = Column(Float)
    destination_lng = Column(Float)

    distance_km = Column(Integer, nullable=False)
    weight_kg = Column(Integer)
    volume_cbm = Column(Integer)
    vehicle_type = Column(String(20), nullable=False)
    vehicle_body_type = Column(String(20))
    cargo_name = Column(String(120))
    cargo_type = Column(String(60))
    cargo_desc = Column(Text)

    base_price = Column(Integer, nullable=False)
    distance_price = Column(Integer, nullable=False, default=0)
    extra_price = Column(Integer, nullable=False)
    desired_price = Column(Integer, nullable=False)
    final_price = Column(Integer, nullable=False)

    allow_combine = Column(Boolean, nullable=False, default=False)
    load_method = Column(Enum(LoadHandlingMethod), nullable=False)
    unload_method = Column(Enum(LoadHandlingMethod), nullable=False)
    status = Column(Enum(QuoteStatus), nullable=False, default=QuoteStatus.OPEN)

    @classmethod
    def open(cls, shipper_id: int, **fields) -> "Quote":
        quote = cls(shipper_id=shipper_id, status=QuoteStatus.OPEN, **fields)
        quote.stamp_created()
        return quote

    @property
    def is_open(self) -> bool:
        return self.status == QuoteStatus.OPEN

    def mark_matched(self) -> None:
        self.status = QuoteStatus.MATCHED
        self.touch()

    def reopen(self) -> None:
        self.status = QuoteStatus.OPEN
        self.touch()

    def update_from(self, **fields) -> None:
        for name, value in fields.items():
            setattr(self, name, value)
        self.touch()


class QuoteChecklistItem(BaseModel):
    __tablename__ = "quote_checklist_items"

    quote_id = Column(ForeignKey("quotes.id"), nullable=False, index=True)
    checklist_item_id = Column(ForeignKey("checklist_items.id"), nullable=False)
    extra_input = Column(String(255))
    extra_fee = Column(Numeric(12, 0), nullable=False, default=0)

    @classmethod
    def create(cls, quote_id: int, checklist_item_id: int, extra_input=None, extra_fee=None):
        item = cls(
            quote_id=quote_id,
            checklist_item_id=checklist_item_id,
            extra_input=extra_input,
            extra_fee=extra_fee if extra_fee is not None else 0,
        )
        item.stamp_created()
        return item


class QuoteStop(BaseModel):
    __tablename__ = "quote_stops"

    quote_id = Column(ForeignKey("quotes.id"), nullable=False, index=True)
    seq = Column(Integer, nullable=False, default=0)
    address = Column(String(255), nullable=False)
    lat = Column(Float)
    lng = Column(Float)
    contact_name = Column(String(64))
    contact_phone = Column(String(40))
    dept_name = Column(String(64))
    manager_name = Column(String(64))

    @classmethod
    def create(cls, quote_id: int, **fields) -> "QuoteStop":
        if fields.get("seq") is None:
            fields["seq"] = 0
        stop = cls(quote_id=quote_id, **fields)
        stop.stamp_created()
        return stop
