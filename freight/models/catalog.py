from sqlalchemy import Boolean, Column, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from freight.models.base import BaseModel
from freight.pricing.surcharges import SurchargeKind


class ChecklistItem(BaseModel):
    __tablename__ = "checklist_items"

    category = Column(String(40))
    name = Column(String(80), nullable=False)
    icon = Column(String(80))
    has_extra_fee = Column(Boolean, nullable=False, default=False)
    base_extra_fee = Column(Numeric(12, 0), nullable=False, default=0)
    requires_extra_input = Column(Boolean, nullable=False, default=False)
    extra_input_label = Column(String(80))
    sort_order = Column(Integer, default=0)
    enabled = Column(Boolean, nullable=False, default=True)

    @classmethod
    def create(cls, name: str, **fields) -> "ChecklistItem":
        defaults = {
            "has_extra_fee": False,
            "base_extra_fee": 0,
            "requires_extra_input": False,
            "sort_order": 0,
            "enabled": True,
        }
        defaults.update({k: v for k, v in fields.items() if v is not None})
        item = cls(name=name, **defaults)
        item.stamp_created()
        return item


class SurchargeOption(BaseModel):
    __tablename__ = "surcharge_options"

    code = Column(String(40), unique=True, nullable=False, index=True)
    option_type = Column(Enum(SurchargeKind), nullable=False)
    min_add_won = Column(Numeric(12, 0))
    max_add_won = Column(Numeric(12, 0))
    min_multiplier = Column(Numeric(6, 3))
    max_multiplier = Column(Numeric(6, 3))
    fixed_add_won = Column(Numeric(12, 0))
    enabled = Column(Boolean, nullable=False, default=True)

    vehicle_rates = relationship(
        "SurchargeOptionVehicleRate",
        back_populates="option",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @classmethod
    def create(cls, code: str, option_type: SurchargeKind, **fields) -> "SurchargeOption":
        option = cls(code=code, option_type=option_type, enabled=fields.pop("enabled", True), **fields)
        option.stamp_created()
        return option


class SurchargeOptionVehicleRate(BaseModel):
    __tablename__ = "surcharge_option_vehicle_rates"

    option_id = Column(ForeignKey("surcharge_options.id"), nullable=False, index=True)
    option = relationship("SurchargeOption", back_populates="vehicle_rates")
    vehicle_type = Column(String(20), nullable=False)
    add_won = Column(Numeric(12, 0), nullable=False)

    @classmethod
    def create(cls, vehicle_type: str, add_won) -> "SurchargeOptionVehicleRate":
        rate = cls(vehicle_type=vehicle_type, add_won=add_won)
        rate.stamp_created()
        return rate
