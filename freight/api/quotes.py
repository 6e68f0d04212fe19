"""Shipper quote endpoints and the cached raw pricing estimate"""
import json
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.config import settings
from freight.core.metrics import cache_hits, cache_misses
from freight.core.rate_limit import check_rate_limit
from freight.core.redis import get_redis
from freight.core.response_builders import build_quote_list_item, build_quote_response
from freight.core.security import Principal, get_current_principal, require_shipper
from freight.db.session import get_db
from freight.schemas.quote import (
    PriceCalcRequest,
    PriceCalcResponse,
    QuoteCreate,
    QuoteListItem,
    QuoteOut,
    QuoteUpdate,
    QuoteValidationOut,
)
from freight.services import quote_service
from freight.services.clients.advisory import AdvisoryClient, get_advisory_client
from freight.services.pricing import calculate_price
from freight.utils.hashing import cache_key

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/calc", response_model=PriceCalcResponse)
async def calc_quote(req: PriceCalcRequest, db: AsyncSession = Depends(get_db)):

    key = cache_key("price", req.model_dump(mode="json"))
    redis = get_redis()

    if redis is not None:
        try:
            cached = await redis.get(key)
            if cached:
                cache_hits.labels(cache_key="price").inc()
                obj = json.loads(cached)
                return PriceCalcResponse(
                    final_price=obj["final_price"],
                    price_breakdown=obj["price_breakdown"]
                )
            cache_misses.labels(cache_key="price").inc()
        except Exception as e:
            logger.warning(f"Cache retrieval failed: {e}")

    result = await calculate_price(db, req)

    if redis is not None:
        try:
            await redis.set(
                key,
                json.dumps(result.model_dump(), default=str),
                ex=settings.PRICE_CACHE_TTL
            )
        except Exception as e:
            logger.warning(f"Cache write failed: {e}")

    return result


@router.post("/validate", response_model=QuoteValidationOut)
async def validate_quote(
    payload: QuoteCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    advisory: AdvisoryClient = Depends(get_advisory_client),
):
    return await quote_service.validate_quote(db, principal, payload, advisory)


@router.post("/", response_model=QuoteOut, status_code=201)
async def create_quote(
    payload: QuoteCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    await check_rate_limit(principal.id)
    quote, items, stops = await quote_service.create_quote(db, principal, payload)
    return build_quote_response(quote, items, stops)


@router.get("/", response_model=List[QuoteListItem])
async def list_quotes(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    quotes = await quote_service.list_quotes(db, principal)
    return [build_quote_list_item(quote) for quote in quotes]


@router.get("/{quote_id}", response_model=QuoteOut)
async def get_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    quote, items, stops = await quote_service.get_quote(db, principal, quote_id)
    return build_quote_response(quote, items, stops)


@router.put("/{quote_id}", response_model=QuoteOut)
async def update_quote(
    quote_id: int,
    payload: QuoteUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    await check_rate_limit(principal.id)
    quote, items, stops = await quote_service.update_quote(db, principal, quote_id, payload)
    return build_quote_response(quote, items, stops)


@router.delete("/{quote_id}")
async def delete_quote(
    quote_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_shipper),
):
    await check_rate_limit(principal.id)
    await quote_service.delete_quote(db, principal, quote_id)
    return {"deleted": True}
