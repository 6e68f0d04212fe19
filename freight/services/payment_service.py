"""Match payments through the payment processor.

``prepare`` records a PENDING payment with the amount the shipper will be
charged; ``confirm`` only approves a payment whose confirmed amount equals
that recorded amount. A payment leaves PENDING exactly once.
"""
import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.audit_log import log_audit
from freight.core.auth_utils import check_not_found, ensure_role
from freight.core.enums import AuditAction, PaymentMethod, PaymentStatus, UserRole
from freight.core.errors import FreightError, conflict, forbidden, invalid_input, unavailable
from freight.core.locks import aggregate_lock
from freight.core.metrics import payments_total, track_db_operation
from freight.core.security import Principal
from freight.models.match import Match
from freight.models.payment import Payment
from freight.models.quote import Quote
from freight.schemas.payment import PaymentConfirmIn, PaymentCreate, PaymentPrepareIn, PaymentPrepareOut
from freight.services.clients.toss_payments import TossPaymentsClient
from freight.utils.idempotency import get_idempotent, scoped_key, set_idempotent

logger = logging.getLogger(__name__)

DEFAULT_ORDER_NAME = "Freight payment"


def new_order_id() -> str:
    return "FRT-" + uuid.uuid4().hex[:16].upper()


def new_order_no() -> str:
    return "ORD-" + uuid.uuid4().hex[:8].upper()


async def ensure_shipper_owns_match(db: AsyncSession, principal: Principal, match_id: int) -> Match:
    ensure_role(principal, UserRole.SHIPPER)
    res = await db.execute(select(Match).where(Match.id == match_id))
    match = res.scalars().first()
    check_not_found(match, "Match", match_id)
    res = await db.execute(select(Quote.shipper_id).where(Quote.id == match.quote_id))
    shipper_id = res.scalars().first()
    if shipper_id != principal.id:
        raise forbidden("Forbidden: Only the quote owner can pay for this match")
    return match


async def create_payment(db: AsyncSession, principal: Principal, req: PaymentCreate) -> Payment:
    await ensure_shipper_owns_match(db, principal, req.match_id)
    order_no = req.order_no if req.order_no and req.order_no.strip() else new_order_no()

    payment = Payment.pending(
        req.match_id,
        order_no,
        method=req.method or PaymentMethod.CARD,
        amount_type=req.amount_type,
        pg_ref=req.pg_ref,
    )
    db.add(payment)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise conflict(f"Order number {order_no} is already in use.")
    await log_audit(db, principal.id, AuditAction.CREATE_PAYMENT, req)
    await db.commit()
    payments_total.labels(status=str(PaymentStatus.PENDING)).inc()
    return payment


@track_db_operation("insert", "payments")
async def prepare_payment(
    db: AsyncSession,
    principal: Principal,
    req: PaymentPrepareIn,
    gateway: TossPaymentsClient,
    idempotency_key: Optional[str] = None,
) -> PaymentPrepareOut:
    await ensure_shipper_owns_match(db, principal, req.match_id)
    replay_key = scoped_key(principal.id, "payments.prepare", idempotency_key)
    cached = await get_idempotent(replay_key)
    if cached:
        return PaymentPrepareOut(**cached)

    if not gateway.is_configured:
        raise unavailable("Payment gateway is not configured.")

    order_id = new_order_id()
    order_name = req.order_name if req.order_name and req.order_name.strip() else DEFAULT_ORDER_NAME

    payment = Payment.pending(req.match_id, order_id, method=PaymentMethod.CARD, total_amount=req.amount)
    db.add(payment)
    await db.flush()
    await log_audit(db, principal.id, AuditAction.PREPARE_PAYMENT, req)
    await db.commit()
    payments_total.labels(status=str(PaymentStatus.PENDING)).inc()

    result = PaymentPrepareOut(
        payment_id=payment.id,
        order_id=order_id,
        amount=req.amount,
        order_name=order_name,
        client_key=gateway.client_key or "",
    )
    await set_idempotent(replay_key, result.model_dump())
    return result


async def _fail(db: AsyncSession, payment: Payment, reason: str) -> None:
    payment.fail()
    await db.commit()
    payments_total.labels(status=str(PaymentStatus.FAILED)).inc()
    logger.error(f"Payment {payment.id} for order {payment.order_no} failed: {reason}")


@track_db_operation("update", "payments")
async def confirm_payment(
    db: AsyncSession,
    principal: Principal,
    req: PaymentConfirmIn,
    gateway: TossPaymentsClient,
) -> Payment:
    res = await db.execute(select(Payment.id).where(Payment.order_no == req.order_id))
    payment_id = res.scalars().first()
    check_not_found(payment_id, "Payment", None)

    async with aggregate_lock("payment", payment_id):
        payment = await _load_payment(db, payment_id)
        await _confirm_locked(db, principal, payment, req, gateway)
    return payment


async def _load_payment(db: AsyncSession, payment_id: int) -> Payment:
    res = await db.execute(
        select(Payment).where(Payment.id == payment_id).execution_options(populate_existing=True)
    )
    return res.scalars().first()


async def _confirm_locked(db, principal, payment, req, gateway) -> None:
    await ensure_shipper_owns_match(db, principal, payment.match_id)

    if payment.status != PaymentStatus.PENDING:
        raise conflict(f"Payment is already {payment.status}.")

    if payment.total_amount is None or payment.total_amount != req.amount:
        await _fail(db, payment, f"amount mismatch (expected {payment.total_amount}, got {req.amount})")
        raise invalid_input("Payment amount does not match the prepared amount.")

    try:
        result = await gateway.confirm(req.payment_key, req.order_id, req.amount)
    except FreightError as e:
        await _fail(db, payment, e.message)
        raise unavailable("Payment gateway is unavailable.") from e

    if result is None or not result.is_done:
        await _fail(db, payment, f"gateway status {getattr(result, 'status', None)}")
        raise unavailable("Payment was not approved by the gateway.")

    payment.complete(paid_at=result.approved_at, payment_key=result.payment_key)
    await log_audit(db, principal.id, AuditAction.CONFIRM_PAYMENT, {"order_id": req.order_id, "amount": req.amount})
    await db.commit()
    payments_total.labels(status=str(PaymentStatus.COMPLETED)).inc()
    logger.info(f"Payment {payment.id} for order {payment.order_no} completed")


async def get_payment(db: AsyncSession, principal: Principal, payment_id: int) -> Payment:
    res = await db.execute(select(Payment).where(Payment.id == payment_id))
    payment = res.scalars().first()
    check_not_found(payment, "Payment", payment_id)
    await ensure_shipper_owns_match(db, principal, payment.match_id)
    return payment


async def get_payments_for_match(db: AsyncSession, principal: Principal, match_id: int) -> List[Payment]:
    await ensure_shipper_owns_match(db, principal, match_id)
    res = await db.execute(
        select(Payment).where(Payment.match_id == match_id).order_by(Payment.created_at.desc(), Payment.id.desc())
    )
    return list(res.scalars().all())


async def get_shipper_payments(db: AsyncSession, principal: Principal) -> List[Payment]:
    ensure_role(principal, UserRole.SHIPPER)
    res = await db.execute(
        select(Payment)
        .join(Match, Match.id == Payment.match_id)
        .join(Quote, Quote.id == Match.quote_id)
        .where(Quote.shipper_id == principal.id)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
    )
    return list(res.scalars().all())
