"""Shipper quotes: pricing, persistence and pre-submission validation."""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.audit_log import log_audit
from freight.core.auth_utils import check_not_found, check_ownership, ensure_role
from freight.core.enums import AuditAction, UserRole
from freight.core.errors import conflict, invalid_input
from freight.core.locks import quote_lock
from freight.core.metrics import quotes_created, track_db_operation
from freight.core.security import Principal
from freight.models.counter_offer import CounterOffer
from freight.models.match import Match
from freight.models.notification import Notification
from freight.models.payment import Payment
from freight.models.quote import Quote, QuoteChecklistItem, QuoteStop
from freight.pricing.calculator import PricingResult, get_pricing_calculator, round_half_up
from freight.pricing.vehicle import VehicleClass
from freight.schemas.quote import QuoteCreate, QuoteValidationOut
from freight.services.clients.advisory import AdvisoryClient
from freight.services.surcharge_service import resolve_rules, surcharge_codes

logger = logging.getLogger(__name__)

LOW_BID_RATIO = Decimal("0.85")
NEAR_CAPACITY_RATIO = Decimal("0.9")

QUOTE_FIELDS = (
    "origin_address",
    "destination_address",
    "origin_lat",
    "origin_lng",
    "destination_lat",
    "destination_lng",
    "distance_km",
    "weight_kg",
    "volume_cbm",
    "vehicle_body_type",
    "cargo_name",
    "cargo_type",
    "cargo_desc",
    "load_method",
    "unload_method",
)


async def price_request(db: AsyncSession, req: QuoteCreate) -> PricingResult:
    if req.distance_km is None or req.distance_km <= 0:
        raise invalid_input("distance must be a positive number of kilometres")
    vehicle = VehicleClass.parse(req.vehicle_type)
    if vehicle is None:
        raise invalid_input("unsupported vehicle class")

    rules = await resolve_rules(db, surcharge_codes(req.vehicle_body_type, req.surcharge_codes))
    return get_pricing_calculator().estimate(
        req.distance_km,
        vehicle,
        rules,
        load_method=req.load_method,
        unload_method=req.unload_method,
        combined_shipment=req.allow_combine,
    )


def _priced_fields(req: QuoteCreate, pricing: PricingResult) -> dict:
    base_price = int(round_half_up(pricing.rate))
    weighted = int(round_half_up(pricing.weighted))
    final_price = int(round_half_up(pricing.final_charge_after_discount))

    fields = {name: getattr(req, name) for name in QUOTE_FIELDS}
    fields.update(
        vehicle_type=pricing.vehicle_class.value,
        base_price=base_price,
        distance_price=0,
        extra_price=max(0, weighted - base_price),
        desired_price=req.desired_price if req.desired_price is not None else final_price,
        final_price=final_price,
        allow_combine=bool(req.allow_combine),
    )
    return fields


def _stage_children(db: AsyncSession, quote_id: int, req: QuoteCreate) -> None:
    for item in req.checklist_items or []:
        db.add(QuoteChecklistItem.create(
            quote_id,
            item.checklist_item_id,
            extra_input=item.extra_input,
            extra_fee=item.extra_fee,
        ))
    for stop in req.stops or []:
        if stop is None or not stop.address or not stop.address.strip():
            continue
        db.add(QuoteStop.create(quote_id, **stop.model_dump()))


async def _load_children(db: AsyncSession, quote_id: int) -> Tuple[list, list]:
    items = await db.execute(
        select(QuoteChecklistItem)
        .where(QuoteChecklistItem.quote_id == quote_id)
        .order_by(QuoteChecklistItem.id)
    )
    stops = await db.execute(
        select(QuoteStop)
        .where(QuoteStop.quote_id == quote_id)
        .order_by(QuoteStop.seq, QuoteStop.id)
    )
    return list(items.scalars().all()), list(stops.scalars().all())


async def _get_owned_quote(db: AsyncSession, principal: Principal, quote_id: int) -> Quote:
    res = await db.execute(
        select(Quote).where(Quote.id == quote_id).execution_options(populate_existing=True)
    )
    quote = res.scalars().first()
    check_not_found(quote, "Quote", quote_id)
    check_ownership(quote.shipper_id, principal, "quote")
    return quote


@track_db_operation("insert", "quotes")
async def create_quote(db: AsyncSession, principal: Principal, req: QuoteCreate):
    ensure_role(principal, UserRole.SHIPPER)
    pricing = await price_request(db, req)

    quote = Quote.open(principal.id, **_priced_fields(req, pricing))
    db.add(quote)
    await db.flush()

    _stage_children(db, quote.id, req)
    await log_audit(db, principal.id, AuditAction.CREATE_QUOTE, req)
    await db.commit()

    quotes_created.labels(vehicle_type=quote.vehicle_type).inc()
    logger.info(f"Quote {quote.id} created by shipper {principal.id} at {quote.final_price}")
    items, stops = await _load_children(db, quote.id)
    return quote, items, stops


async def list_quotes(db: AsyncSession, principal: Principal) -> List[Quote]:
    ensure_role(principal, UserRole.SHIPPER)
    res = await db.execute(
        select(Quote)
        .where(Quote.shipper_id == principal.id)
        .order_by(Quote.created_at.desc(), Quote.id.desc())
    )
    return list(res.scalars().all())


async def get_quote(db: AsyncSession, principal: Principal, quote_id: int):
    ensure_role(principal, UserRole.SHIPPER)
    quote = await _get_owned_quote(db, principal, quote_id)
    items, stops = await _load_children(db, quote_id)
    return quote, items, stops


@track_db_operation("update", "quotes")
async def update_quote(db: AsyncSession, principal: Principal, quote_id: int, req: QuoteCreate):
    ensure_role(principal, UserRole.SHIPPER)
    async with quote_lock(quote_id):
        quote = await _get_owned_quote(db, principal, quote_id)
        if not quote.is_open:
            raise conflict(f"Quote in status {quote.status} cannot be modified.")
        pricing = await price_request(db, req)

        quote.update_from(**_priced_fields(req, pricing))
        await db.execute(delete(QuoteChecklistItem).where(QuoteChecklistItem.quote_id == quote_id))
        await db.execute(delete(QuoteStop).where(QuoteStop.quote_id == quote_id))
        _stage_children(db, quote_id, req)
        await log_audit(db, principal.id, AuditAction.UPDATE_QUOTE, {"id": quote_id, **req.model_dump()})
        await db.commit()

    items, stops = await _load_children(db, quote_id)
    return quote, items, stops


@track_db_operation("delete", "quotes")
async def delete_quote(db: AsyncSession, principal: Principal, quote_id: int) -> None:
    ensure_role(principal, UserRole.SHIPPER)
    async with quote_lock(quote_id):
        quote = await _get_owned_quote(db, principal, quote_id)

        res = await db.execute(select(Match).where(Match.quote_id == quote_id))
        matches = list(res.scalars().all())
        if any(match.is_active for match in matches):
            raise conflict("Quote has an active match and cannot be deleted.")

        match_ids = [match.id for match in matches]
        if match_ids:
            paid = await db.execute(select(Payment.id).where(Payment.match_id.in_(match_ids)).limit(1))
            if paid.scalars().first() is not None:
                raise conflict("Quote has payment records and cannot be deleted.")
            await db.execute(delete(Notification).where(Notification.match_id.in_(match_ids)))
            await db.execute(delete(Match).where(Match.id.in_(match_ids)))

        await db.execute(delete(CounterOffer).where(CounterOffer.quote_id == quote_id))
        await db.execute(delete(QuoteChecklistItem).where(QuoteChecklistItem.quote_id == quote_id))
        await db.execute(delete(QuoteStop).where(QuoteStop.quote_id == quote_id))
        await db.delete(quote)
        await log_audit(db, principal.id, AuditAction.DELETE_QUOTE, {"id": quote_id})
        await db.commit()

    logger.info(f"Quote {quote_id} deleted by shipper {principal.id}")


def validation_comments(req: QuoteCreate, pricing: PricingResult) -> List[str]:
    comments = []

    desired = req.desired_price
    if desired is not None and desired > 0:
        threshold = round_half_up(pricing.total_min * LOW_BID_RATIO)
        if Decimal(desired) < threshold:
            comments.append(
                "Desired price is below 85% of the estimated minimum. Matching may be difficult."
            )

    weight = req.weight_kg
    vehicle = pricing.vehicle_class
    if weight is not None and weight > 0:
        capacity = vehicle.default_capacity_kg
        next_class = vehicle.next_higher()
        if weight > capacity:
            if next_class is not None:
                comments.append(
                    f"Cargo weight exceeds the vehicle capacity ({capacity}kg). "
                    f"Please choose {next_class.value} or larger."
                )
            else:
                comments.append(
                    f"Cargo weight exceeds the vehicle capacity ({capacity}kg). "
                    f"Please choose a larger vehicle."
                )
        elif Decimal(weight) > Decimal(capacity) * NEAR_CAPACITY_RATIO and next_class is not None:
            comments.append(
                f"Cargo weight is over 90% of the vehicle capacity ({capacity}kg). "
                f"Consider {next_class.value} for headroom."
            )
    return comments


def build_advisory_prompt(req: QuoteCreate, pricing: PricingResult, comments: List[str]) -> str:
    lines = [
        "Write one or two sentences of advice on this freight quote. "
        "Avoid overconfident statements and keep it short. "
        "If the cargo name or description suggests handling precautions "
        "(fragile, keep dry, keep upright), recommend them.",
        "Input summary:",
        f"- distance (km): {req.distance_km}",
        f"- vehicle: {req.vehicle_type}",
        f"- body type: {req.vehicle_body_type}",
        f"- cargo name: {req.cargo_name}",
        f"- cargo description: {req.cargo_desc}",
        f"- cargo weight (kg): {req.weight_kg}",
        f"- desired price: {req.desired_price}",
        f"- load / unload: {req.load_method} / {req.unload_method}",
        "Estimated price range:",
        f"- min: {pricing.total_min}",
        f"- max: {pricing.total_max}",
    ]
    if comments:
        lines.append("Warnings already raised:")
        lines.extend(f"- {comment}" for comment in comments)
    return "\n".join(lines)


async def validate_quote(
    db: AsyncSession,
    principal: Principal,
    req: QuoteCreate,
    advisory: Optional[AdvisoryClient] = None,
) -> QuoteValidationOut:
    ensure_role(principal, UserRole.SHIPPER, UserRole.DRIVER, UserRole.ADMIN)
    pricing = await price_request(db, req)
    comments = validation_comments(req, pricing)

    if advisory is not None:
        advice = await advisory.generate_advice(build_advisory_prompt(req, pricing, comments))
        if advice:
            comments.append(advice)

    return QuoteValidationOut(
        estimated_min=int(round_half_up(pricing.total_min)),
        estimated_max=int(round_half_up(pricing.total_max)),
        estimated_weighted=int(round_half_up(pricing.weighted)),
        comments=comments,
    )
