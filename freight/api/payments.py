from typing import List, Optional

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.rate_limit import check_rate_limit
from freight.core.response_builders import build_payment_response, build_payment_response_list
from freight.core.security import Principal, require_shipper
from freight.db.session import get_db
from freight.schemas.payment import PaymentConfirmIn, PaymentCreate, PaymentOut, PaymentPrepareIn, PaymentPrepareOut
from freight.services import payment_service
from freight.services.clients.toss_payments import TossPaymentsClient, get_payments_client

router = APIRouter(prefix="/payments", tags=["payments"])


@router.post("/", response_model=PaymentOut, status_code=201)
async def create_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    await check_rate_limit(principal.id)
    return build_payment_response(await payment_service.create_payment(db, principal, payload))


@router.post("/prepare", response_model=PaymentPrepareOut)
async def prepare_payment(
    payload: PaymentPrepareIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
    gateway: TossPaymentsClient = Depends(get_payments_client),
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
):
    await check_rate_limit(principal.id)
    return await payment_service.prepare_payment(db, principal, payload, gateway, idempotency_key)


@router.post("/confirm", response_model=PaymentOut)
async def confirm_payment(
    payload: PaymentConfirmIn,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
    gateway: TossPaymentsClient = Depends(get_payments_client),
):
    await check_rate_limit(principal.id)
    return build_payment_response(await payment_service.confirm_payment(db, principal, payload, gateway))


@router.get("/", response_model=List[PaymentOut])
async def list_my_payments(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    return build_payment_response_list(await payment_service.get_shipper_payments(db, principal))


@router.get("/match/{match_id}", response_model=List[PaymentOut])
async def list_match_payments(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    return build_payment_response_list(await payment_service.get_payments_for_match(db, principal, match_id))


@router.get("/{payment_id}", response_model=PaymentOut)
async def get_payment(
    payment_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    return build_payment_response(await payment_service.get_payment(db, principal, payment_id))
