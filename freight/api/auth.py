from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight.db.session import get_db
from freight.schemas.auth import DriverSignupIn, LoginIn, ShipperSignupIn, SignupOut, TokenOut
from freight.services import account_service
from freight.services.clients.business_registry import BusinessRegistryClient, get_registry_client

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup/shipper", response_model=SignupOut, status_code=201)
async def signup_shipper(
    payload: ShipperSignupIn,
    db: AsyncSession = Depends(get_db),
    registry: BusinessRegistryClient = Depends(get_registry_client),
):
    user = await account_service.signup_shipper(db, payload, registry)
    return SignupOut(id=user.id, role=user.role)


@router.post("/signup/driver", response_model=SignupOut, status_code=201)
async def signup_driver(payload: DriverSignupIn, db: AsyncSession = Depends(get_db)):
    user = await account_service.signup_driver(db, payload)
    return SignupOut(id=user.id, role=user.role)


@router.post("/login", response_model=TokenOut)
async def login(payload: LoginIn, db: AsyncSession = Depends(get_db)):
    return await account_service.login(db, payload)
