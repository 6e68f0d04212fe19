"""Driver price proposals on open quotes.

Answering an offer only changes the offer itself; the quote price and any
match are left alone.
"""
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.audit_log import log_audit
from freight.core.auth_utils import check_not_found, check_ownership, ensure_role
from freight.core.enums import AuditAction, CounterOfferStatus, NotificationType, UserRole
from freight.core.errors import conflict
from freight.core.locks import quote_lock
from freight.core.security import Principal
from freight.models.counter_offer import CounterOffer
from freight.models.quote import Quote
from freight.schemas.counter_offer import CounterOfferCreate
from freight.services.notification_service import create_notification

logger = logging.getLogger(__name__)


async def _load_quote(db: AsyncSession, quote_id: int) -> Quote:
    res = await db.execute(
        select(Quote).where(Quote.id == quote_id).execution_options(populate_existing=True)
    )
    quote = res.scalars().first()
    check_not_found(quote, "Quote", quote_id)
    return quote


async def create_offer(
    db: AsyncSession,
    principal: Principal,
    quote_id: int,
    req: CounterOfferCreate,
) -> CounterOffer:
    ensure_role(principal, UserRole.DRIVER)
    async with quote_lock(quote_id):
        quote = await _load_quote(db, quote_id)
        if not quote.is_open:
            raise conflict("Quote is not open for offers.")

        res = await db.execute(
            select(CounterOffer.id).where(
                CounterOffer.quote_id == quote_id,
                CounterOffer.driver_id == principal.id,
                CounterOffer.status == CounterOfferStatus.PENDING,
            )
        )
        if res.scalars().first() is not None:
            raise conflict("You already have a pending offer on this quote.")

        offer = CounterOffer.pending(quote_id, principal.id, req.proposed_price, message=req.message)
        db.add(offer)
        create_notification(
            db, quote.shipper_id, NotificationType.COUNTER_OFFER_CREATED,
            "A driver proposed a new price.",
        )
        await log_audit(db, principal.id, AuditAction.CREATE_COUNTER_OFFER, {"quote_id": quote_id, **req.model_dump()})
        await db.commit()

    logger.info(f"Counter offer {offer.id} by driver {principal.id} on quote {quote_id}")
    return offer


async def get_offers_for_quote(db: AsyncSession, principal: Principal, quote_id: int) -> List[CounterOffer]:
    ensure_role(principal, UserRole.SHIPPER)
    quote = await _load_quote(db, quote_id)
    check_ownership(quote.shipper_id, principal, "quote")
    res = await db.execute(
        select(CounterOffer)
        .where(CounterOffer.quote_id == quote_id)
        .order_by(CounterOffer.created_at.desc(), CounterOffer.id.desc())
    )
    return list(res.scalars().all())


async def get_my_offers(db: AsyncSession, principal: Principal) -> List[CounterOffer]:
    ensure_role(principal, UserRole.DRIVER)
    res = await db.execute(
        select(CounterOffer)
        .where(CounterOffer.driver_id == principal.id)
        .order_by(CounterOffer.created_at.desc(), CounterOffer.id.desc())
    )
    return list(res.scalars().all())


async def _respond(db: AsyncSession, principal: Principal, offer_id: int, accept: bool) -> CounterOffer:
    ensure_role(principal, UserRole.SHIPPER)
    res = await db.execute(select(CounterOffer.quote_id).where(CounterOffer.id == offer_id))
    quote_id = res.scalars().first()
    check_not_found(quote_id, "Counter offer", offer_id)

    async with quote_lock(quote_id):
        res = await db.execute(
            select(CounterOffer).where(CounterOffer.id == offer_id).execution_options(populate_existing=True)
        )
        offer = res.scalars().first()
        check_not_found(offer, "Counter offer", offer_id)
        quote = await _load_quote(db, offer.quote_id)
        check_ownership(quote.shipper_id, principal, "quote")

        if accept:
            offer.accept()
            notification_type = NotificationType.COUNTER_OFFER_ACCEPTED
            message = "The shipper accepted your offer."
            action = AuditAction.ACCEPT_COUNTER_OFFER
        else:
            offer.reject()
            notification_type = NotificationType.COUNTER_OFFER_REJECTED
            message = "The shipper rejected your offer."
            action = AuditAction.REJECT_COUNTER_OFFER

        create_notification(db, offer.driver_id, notification_type, message)
        await log_audit(db, principal.id, action, {"offer_id": offer_id})
        await db.commit()

    return offer


async def accept_offer(db: AsyncSession, principal: Principal, offer_id: int) -> CounterOffer:
    return await _respond(db, principal, offer_id, accept=True)


async def reject_offer(db: AsyncSession, principal: Principal, offer_id: int) -> CounterOffer:
    return await _respond(db, principal, offer_id, accept=False)
