from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.rate_limit import check_rate_limit
from freight.core.response_builders import build_match_response, build_match_response_list
from freight.core.security import Principal, require_driver, require_shipper
from freight.db.session import get_db
from freight.schemas.match import MatchCreate, MatchOut
from freight.services import match_service

shipper_router = APIRouter(prefix="/shipper/matches", tags=["matches"])
driver_router = APIRouter(prefix="/driver/matches", tags=["matches"])


@shipper_router.post("/", response_model=MatchOut, status_code=201)
async def create_match(
    payload: MatchCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    await check_rate_limit(principal.id)
    match = await match_service.create_match(db, principal, payload.quote_id)
    return build_match_response(match)


@shipper_router.get("/", response_model=List[MatchOut])
async def list_shipper_matches(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    return build_match_response_list(await match_service.get_shipper_matches(db, principal))


@shipper_router.get("/quote/{quote_id}", response_model=MatchOut)
async def get_match_by_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    return build_match_response(await match_service.get_match_by_quote(db, principal, quote_id))


@shipper_router.get("/{match_id}", response_model=MatchOut)
async def get_shipper_match(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    return build_match_response(await match_service.get_match(db, principal, match_id))


@shipper_router.post("/{match_id}/cancel", response_model=MatchOut)
async def shipper_cancel_match(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    await check_rate_limit(principal.id)
    return build_match_response(await match_service.cancel_match(db, principal, match_id))


@driver_router.get("/open", response_model=List[MatchOut])
async def list_open_matches(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    return build_match_response_list(await match_service.get_open_matches(db, principal))


@driver_router.get("/", response_model=List[MatchOut])
async def list_driver_matches(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    return build_match_response_list(await match_service.get_driver_matches(db, principal))


@driver_router.get("/{match_id}", response_model=MatchOut)
async def get_driver_match(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    return build_match_response(await match_service.get_match(db, principal, match_id))


@driver_router.post("/{match_id}/accept", response_model=MatchOut)
async def accept_match(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    await check_rate_limit(principal.id)
    return build_match_response(await match_service.accept_match(db, principal, match_id))


@driver_router.post("/{match_id}/cancel", response_model=MatchOut)
async def driver_cancel_match(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    await check_rate_limit(principal.id)
    return build_match_response(await match_service.cancel_match(db, principal, match_id))


@driver_router.post("/{match_id}/start", response_model=MatchOut)
async def start_transit(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    await check_rate_limit(principal.id)
    return build_match_response(await match_service.start_transit(db, principal, match_id))


@driver_router.post("/{match_id}/complete", response_model=MatchOut)
async def complete_match(
    match_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_driver),
):
    await check_rate_limit(principal.id)
    return build_match_response(await match_service.complete_match(db, principal, match_id))
