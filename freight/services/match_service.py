"""Quote/match lifecycle.

Invariants kept here:

* at most one non-cancelled match per quote;
* a match is accepted at most once, and accepting flips its quote to MATCHED;
* cancelling reopens the quote so it can be matched again.

Mutations run under the per-aggregate locks from ``freight.core.locks``
(match lock first, then quote lock) and re-read their rows after acquiring
them. The partial unique index on ``matches`` and the guarded UPDATE in
``accept_match`` keep the same guarantees across processes.
"""
import logging
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.audit_log import log_audit
from freight.core.auth_utils import check_not_found, check_ownership, ensure_role
from freight.core.enums import AuditAction, MatchStatus, NotificationType, UserRole
from freight.core.errors import conflict, forbidden, not_found
from freight.core.locks import match_lock, quote_lock
from freight.core.metrics import match_transitions, track_db_operation
from freight.core.security import Principal
from freight.models.match import Match
from freight.models.quote import Quote
from freight.services.notification_service import create_notification

logger = logging.getLogger(__name__)

ALREADY_ACCEPTED = "Match has already been accepted."


async def _load_quote(db: AsyncSession, quote_id: int) -> Optional[Quote]:
    res = await db.execute(
        select(Quote).where(Quote.id == quote_id).execution_options(populate_existing=True)
    )
    return res.scalars().first()


async def _load_match(db: AsyncSession, match_id: int) -> Match:
    res = await db.execute(
        select(Match).where(Match.id == match_id).execution_options(populate_existing=True)
    )
    match = res.scalars().first()
    check_not_found(match, "Match", match_id)
    return match


async def _active_match_for_quote(db: AsyncSession, quote_id: int) -> Optional[Match]:
    res = await db.execute(
        select(Match)
        .where(Match.quote_id == quote_id, Match.status != MatchStatus.CANCELLED)
        .execution_options(populate_existing=True)
    )
    return res.scalars().first()


def _can_read(principal: Principal, match: Match, quote: Optional[Quote]) -> bool:
    if principal.is_shipper:
        return quote is not None and quote.shipper_id == principal.id
    if principal.is_driver:
        return match.accepted and match.driver_id == principal.id
    return False


@track_db_operation("insert", "matches")
async def create_match(db: AsyncSession, principal: Principal, quote_id: int) -> Match:
    ensure_role(principal, UserRole.SHIPPER)
    async with quote_lock(quote_id):
        quote = await _load_quote(db, quote_id)
        check_not_found(quote, "Quote", quote_id)
        check_ownership(quote.shipper_id, principal, "quote")
        if not quote.is_open:
            raise conflict(f"Quote in status {quote.status} cannot be matched.")
        if await _active_match_for_quote(db, quote_id) is not None:
            raise conflict("Quote already has an active match.")

        match = Match.ready(quote_id)
        db.add(match)
        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise conflict("Quote already has an active match.")

        create_notification(
            db, quote.shipper_id, NotificationType.MATCH_CREATED,
            "Your quote is now open to drivers.", match_id=match.id,
        )
        await log_audit(db, principal.id, AuditAction.CREATE_MATCH, {"quote_id": quote_id})
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise conflict("Quote already has an active match.")

    match_transitions.labels(transition="create").inc()
    logger.info(f"Match {match.id} created for quote {quote_id}")
    return match


async def get_open_matches(db: AsyncSession, principal: Principal) -> List[Match]:
    ensure_role(principal, UserRole.DRIVER)
    res = await db.execute(
        select(Match)
        .where(Match.accepted.is_(False), Match.status == MatchStatus.READY)
        .order_by(Match.created_at.desc(), Match.id.desc())
    )
    return list(res.scalars().all())


@track_db_operation("update", "matches")
async def accept_match(db: AsyncSession, principal: Principal, match_id: int) -> Match:
    ensure_role(principal, UserRole.DRIVER)
    async with match_lock(match_id):
        match = await _load_match(db, match_id)
        async with quote_lock(match.quote_id):
            quote = await _load_quote(db, match.quote_id)
            check_not_found(quote, "Quote", match.quote_id)

            match.accept(principal.id)
            res = await db.execute(
                update(Match)
                .where(Match.id == match_id, Match.accepted.is_(False), Match.status == MatchStatus.READY)
                .values(
                    driver_id=match.driver_id,
                    accepted=True,
                    accepted_at=match.accepted_at,
                    updated_at=match.updated_at,
                )
                .execution_options(synchronize_session=False)
            )
            if res.rowcount != 1:
                await db.rollback()
                raise conflict(ALREADY_ACCEPTED)

            quote.mark_matched()
            create_notification(
                db, quote.shipper_id, NotificationType.MATCH_ACCEPTED,
                "A driver accepted your shipment.", match_id=match.id,
            )
            await log_audit(db, principal.id, AuditAction.ACCEPT_MATCH, {"match_id": match_id})
            await db.commit()

    match_transitions.labels(transition="accept").inc()
    logger.info(f"Match {match_id} accepted by driver {principal.id}")
    return match


@track_db_operation("update", "matches")
async def cancel_match(db: AsyncSession, principal: Principal, match_id: int) -> Match:
    ensure_role(principal, UserRole.SHIPPER, UserRole.DRIVER)
    async with match_lock(match_id):
        match = await _load_match(db, match_id)
        async with quote_lock(match.quote_id):
            quote = await _load_quote(db, match.quote_id)
            check_not_found(quote, "Quote", match.quote_id)

            if principal.is_shipper:
                if quote.shipper_id != principal.id:
                    raise forbidden("Only the quote owner can cancel this match.")
                receiver_id = match.driver_id if match.accepted else None
            else:
                if not match.accepted or match.driver_id != principal.id:
                    raise forbidden("Only the assigned driver can cancel this match.")
                receiver_id = quote.shipper_id

            match.cancel()
            quote.reopen()
            if receiver_id is not None:
                create_notification(
                    db, receiver_id, NotificationType.MATCH_CANCELLED,
                    "The match was cancelled.", match_id=match.id,
                )
            await log_audit(db, principal.id, AuditAction.CANCEL_MATCH, {"match_id": match_id})
            await db.commit()

    match_transitions.labels(transition="cancel").inc()
    logger.info(f"Match {match_id} cancelled by {principal.role} {principal.id}")
    return match


async def _driver_transition(
    db: AsyncSession,
    principal: Principal,
    match_id: int,
    transition: str,
    action: AuditAction,
) -> Match:
    ensure_role(principal, UserRole.DRIVER)
    async with match_lock(match_id):
        match = await _load_match(db, match_id)
        if not match.accepted or match.driver_id != principal.id:
            raise forbidden("Only the assigned driver can update this match.")
        if transition == "start":
            match.start_transit()
        else:
            match.complete()
        await log_audit(db, principal.id, action, {"match_id": match_id})
        await db.commit()

    match_transitions.labels(transition=transition).inc()
    return match


async def start_transit(db: AsyncSession, principal: Principal, match_id: int) -> Match:
    return await _driver_transition(db, principal, match_id, "start", AuditAction.START_TRANSIT)


async def complete_match(db: AsyncSession, principal: Principal, match_id: int) -> Match:
    return await _driver_transition(db, principal, match_id, "complete", AuditAction.COMPLETE_MATCH)


async def get_match(db: AsyncSession, principal: Principal, match_id: int) -> Match:
    if principal is None:
        raise forbidden("Authentication required")
    match = await _load_match(db, match_id)
    quote = await _load_quote(db, match.quote_id)
    if not _can_read(principal, match, quote):
        raise forbidden("Forbidden: You can only access your own matches")
    return match


async def get_match_by_quote(db: AsyncSession, principal: Principal, quote_id: int) -> Match:
    ensure_role(principal, UserRole.SHIPPER)
    quote = await _load_quote(db, quote_id)
    check_not_found(quote, "Quote", quote_id)
    check_ownership(quote.shipper_id, principal, "quote")
    match = await _active_match_for_quote(db, quote_id)
    if match is None:
        raise not_found(f"No active match for quote {quote_id}")
    return match


async def get_driver_matches(db: AsyncSession, principal: Principal) -> List[Match]:
    ensure_role(principal, UserRole.DRIVER)
    res = await db.execute(
        select(Match)
        .where(Match.driver_id == principal.id, Match.status != MatchStatus.CANCELLED)
        .order_by(Match.created_at.desc(), Match.id.desc())
    )
    return list(res.scalars().all())


async def get_shipper_matches(db: AsyncSession, principal: Principal) -> List[Match]:
    ensure_role(principal, UserRole.SHIPPER)
    res = await db.execute(
        select(Match)
        .join(Quote, Quote.id == Match.quote_id)
        .where(Quote.shipper_id == principal.id, Match.status != MatchStatus.CANCELLED)
        .order_by(Match.created_at.desc(), Match.id.desc())
    )
    return list(res.scalars().all())
