from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from freight.pricing.vehicle import VehicleClass


class TruckCreate(BaseModel):
    vehicle_type: Optional[VehicleClass] = None
    vehicle_body_type: Optional[str] = Field(default=None, max_length=20)
    tonnage: Optional[float] = Field(default=None, gt=0)
    max_weight: Optional[float] = Field(default=None, gt=0)
    max_volume: Optional[float] = Field(default=None, gt=0)
    name: Optional[str] = Field(default=None, max_length=100)
    image_url: Optional[str] = Field(default=None, max_length=500)
    insurance: Optional[str] = Field(default=None, max_length=255)
    odometer_km: Optional[float] = Field(default=None, ge=0)
    last_inspection_date: Optional[date] = None


class TruckUpdate(TruckCreate):
    pass


class TruckOut(BaseModel):
    id: int
    driver_id: int
    vehicle_type: Optional[str] = None
    vehicle_body_type: Optional[str] = None
    tonnage: Optional[float] = None
    max_weight: Optional[float] = None
    max_volume: Optional[float] = None
    name: Optional[str] = None
    image_url: Optional[str] = None
    approved: bool
    insurance: Optional[str] = None
    odometer_km: Optional[float] = None
    last_inspection_date: Optional[date] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
