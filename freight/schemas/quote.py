from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from freight.core.enums import LoadHandlingMethod, QuoteStatus


class QuoteChecklistItemIn(BaseModel):
    checklist_item_id: int
    extra_input: Optional[str] = None
    extra_fee: Optional[Decimal] = None


class QuoteChecklistItemOut(BaseModel):
    checklist_item_id: int
    extra_input: Optional[str] = None
    extra_fee: Decimal = Decimal(0)


class QuoteStopIn(BaseModel):
    seq: Optional[int] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    dept_name: Optional[str] = None
    manager_name: Optional[str] = None


class QuoteStopOut(BaseModel):
    id: int
    seq: int
    address: str
    lat: Optional[float] = None
    lng: Optional[float] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    dept_name: Optional[str] = None
    manager_name: Optional[str] = None


class QuoteCreate(BaseModel):
    origin_address: str = Field(min_length=1)
    destination_address: str = Field(min_length=1)
    origin_lat: Optional[float] = None
    origin_lng: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    distance_km: int
    weight_kg: Optional[int] = None
    volume_cbm: Optional[int] = None
    vehicle_type: str
    vehicle_body_type: Optional[str] = None
    cargo_name: Optional[str] = None
    cargo_type: Optional[str] = None
    cargo_desc: Optional[str] = None
    desired_price: Optional[int] = None
    allow_combine: bool = False
    load_method: LoadHandlingMethod = LoadHandlingMethod.SHIPPER
    unload_method: LoadHandlingMethod = LoadHandlingMethod.SHIPPER
    surcharge_codes: List[str] = Field(default_factory=list)
    checklist_items: List[QuoteChecklistItemIn] = Field(default_factory=list)
    stops: List[QuoteStopIn] = Field(default_factory=list)


class QuoteUpdate(QuoteCreate):
    pass


class QuoteListItem(BaseModel):
    id: int
    origin_address: str
    destination_address: str
    distance_km: int
    vehicle_type: str
    vehicle_body_type: Optional[str] = None
    cargo_name: Optional[str] = None
    desired_price: int
    final_price: int
    status: QuoteStatus
    created_at: datetime


class QuoteOut(BaseModel):
    id: int
    shipper_id: int
    origin_address: str
    destination_address: str
    origin_lat: Optional[float] = None
    origin_lng: Optional[float] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    distance_km: int
    weight_kg: Optional[int] = None
    volume_cbm: Optional[int] = None
    vehicle_type: str
    vehicle_body_type: Optional[str] = None
    cargo_name: Optional[str] = None
    cargo_type: Optional[str] = None
    cargo_desc: Optional[str] = None
    base_price: int
    distance_price: int
    extra_price: int
    desired_price: int
    final_price: int
    allow_combine: bool
    load_method: LoadHandlingMethod
    unload_method: LoadHandlingMethod
    status: QuoteStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
    checklist_items: List[QuoteChecklistItemOut] = Field(default_factory=list)
    stops: List[QuoteStopOut] = Field(default_factory=list)


class QuoteValidationOut(BaseModel):
    estimated_min: int
    estimated_max: int
    estimated_weighted: int
    comments: List[str] = Field(default_factory=list)


class PriceCalcRequest(BaseModel):
    distance_km: int
    vehicle_type: str
    surcharge_codes: List[str] = Field(default_factory=list)
    load_method: LoadHandlingMethod = LoadHandlingMethod.SHIPPER
    unload_method: LoadHandlingMethod = LoadHandlingMethod.SHIPPER
    combined_shipment: bool = False


class PriceCalcResponse(BaseModel):
    final_price: int
    price_breakdown: dict
