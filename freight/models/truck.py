from sqlalchemy import Boolean, Column, Date, Float, ForeignKey, String

from freight.models.base import BaseModel


class Truck(BaseModel):
    """A vehicle registered by a driver. ``approved`` is never set by the driver."""
    __tablename__ = "trucks"

    driver_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    vehicle_type = Column(String(20))
    vehicle_body_type = Column(String(20))
    tonnage = Column(Float)
    max_weight = Column(Float)
    max_volume = Column(Float)
    name = Column(String(100))
    image_url = Column(String(500))
    approved = Column(Boolean, nullable=False, default=False)
    insurance = Column(String(255))
    odometer_km = Column(Float)
    last_inspection_date = Column(Date)

    @classmethod
    def register(cls, driver_id: int, **fields) -> "Truck":
        truck = cls(driver_id=driver_id, approved=False, **fields)
        truck.stamp_created()
        return truck

    def update(self, **fields) -> None:
        for name, value in fields.items():
            setattr(self, name, value)
        self.touch()
