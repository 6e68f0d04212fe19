from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.rate_limit import check_rate_limit
from freight.core.response_builders import build_counter_offer_response, build_counter_offer_response_list
from freight.core.security import Principal, require_driver, require_shipper
from freight.db.session import get_db
from freight.schemas.counter_offer import CounterOfferCreate, CounterOfferOut
from freight.services import counter_offer_service

driver_router = APIRouter(prefix="/driver/counter-offers", tags=["counter-offers"])
shipper_router = APIRouter(prefix="/shipper/counter-offers", tags=["counter-offers"])


@driver_router.post("/quotes/{quote_id}", response_model=CounterOfferOut, status_code=201)
async def create_offer(
    quote_id: int,
    payload: CounterOfferCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    await check_rate_limit(principal.id)
    offer = await counter_offer_service.create_offer(db, principal, quote_id, payload)
    return build_counter_offer_response(offer)


@driver_router.get("/", response_model=List[CounterOfferOut])
async def list_my_offers(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    return build_counter_offer_response_list(await counter_offer_service.get_my_offers(db, principal))


@shipper_router.get("/quotes/{quote_id}", response_model=List[CounterOfferOut])
async def list_offers_for_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    offers = await counter_offer_service.get_offers_for_quote(db, principal, quote_id)
    return build_counter_offer_response_list(offers)


@shipper_router.post("/{offer_id}/accept", response_model=CounterOfferOut)
async def accept_offer(
    offer_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    await check_rate_limit(principal.id)
    return build_counter_offer_response(await counter_offer_service.accept_offer(db, principal, offer_id))


@shipper_router.post("/{offer_id}/reject", response_model=CounterOfferOut)
async def reject_offer(
    offer_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    await check_rate_limit(principal.id)
    return build_counter_offer_response(await counter_offer_service.reject_offer(db, principal, offer_id))
