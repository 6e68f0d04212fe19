from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.audit_log import log_audit
from freight.core.auth_utils import check_not_found, check_ownership, ensure_role
from freight.core.enums import AuditAction, UserRole
from freight.core.security import Principal
from freight.models.truck import Truck
from freight.schemas.truck import TruckCreate, TruckUpdate


def _fields(req: TruckCreate, partial: bool = False) -> dict:
    data = req.model_dump(exclude_unset=partial)
    if data.get("vehicle_type") is not None:
        data["vehicle_type"] = str(data["vehicle_type"])
    return data


async def _get_owned_truck(db: AsyncSession, principal: Principal, truck_id: int) -> Truck:
    ensure_role(principal, UserRole.DRIVER)
    res = await db.execute(select(Truck).where(Truck.id == truck_id))
    truck = res.scalars().first()
    check_not_found(truck, "Truck", truck_id)
    check_ownership(truck.driver_id, principal, "truck")
    return truck


async def create_truck(db: AsyncSession, principal: Principal, req: TruckCreate) -> Truck:
    ensure_role(principal, UserRole.DRIVER)
    truck = Truck.register(principal.id, **_fields(req))
    db.add(truck)
    await log_audit(db, principal.id, AuditAction.CREATE_TRUCK, req)
    await db.commit()
    return truck


async def list_trucks(db: AsyncSession, principal: Principal) -> List[Truck]:
    ensure_role(principal, UserRole.DRIVER)
    res = await db.execute(select(Truck).where(Truck.driver_id == principal.id).order_by(Truck.id))
    return list(res.scalars().all())


async def get_truck(db: AsyncSession, principal: Principal, truck_id: int) -> Truck:
    return await _get_owned_truck(db, principal, truck_id)


async def update_truck(db: AsyncSession, principal: Principal, truck_id: int, req: TruckUpdate) -> Truck:
    truck = await _get_owned_truck(db, principal, truck_id)
    truck.update(**_fields(req, partial=True))
    await log_audit(db, principal.id, AuditAction.UPDATE_TRUCK, {"id": truck_id, **req.model_dump(exclude_unset=True)})
    await db.commit()
    return truck


async def delete_truck(db: AsyncSession, principal: Principal, truck_id: int) -> None:
    truck = await _get_owned_truck(db, principal, truck_id)
    await db.delete(truck)
    await log_audit(db, principal.id, AuditAction.DELETE_TRUCK, {"id": truck_id})
    await db.commit()
