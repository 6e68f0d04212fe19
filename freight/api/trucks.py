from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.response_builders import build_truck_response
from freight.core.security import Principal, require_driver
from freight.db.session import get_db
from freight.schemas.truck import TruckCreate, TruckOut, TruckUpdate
from freight.services import truck_service

router = APIRouter(prefix="/driver/trucks", tags=["trucks"])


@router.post("/", response_model=TruckOut, status_code=201)
async def create_truck(
    payload: TruckCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    return build_truck_response(await truck_service.create_truck(db, principal, payload))


@router.get("/", response_model=List[TruckOut])
async def list_trucks(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    return [build_truck_response(t) for t in await truck_service.list_trucks(db, principal)]


@router.get("/{truck_id}", response_model=TruckOut)
async def get_truck(
    truck_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    return build_truck_response(await truck_service.get_truck(db, principal, truck_id))


@router.put("/{truck_id}", response_model=TruckOut)
async def update_truck(
    truck_id: int,
    payload: TruckUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    return build_truck_response(await truck_service.update_truck(db, principal, truck_id, payload))


@router.delete("/{truck_id}")
async def delete_truck(
    truck_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    await truck_service.delete_truck(db, principal, truck_id)
    return {"deleted": True}
