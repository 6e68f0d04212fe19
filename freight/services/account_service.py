import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.audit_log import log_audit
from freight.core.config import settings
from freight.core.enums import AuditAction, UserRole
from freight.core.errors import ErrorKind, FreightError, conflict, invalid_input
from freight.core.security import create_access_token, hash_password, verify_password
from freight.models.user import User
from freight.schemas.auth import DriverSignupIn, LoginIn, ShipperSignupIn, TokenOut
from freight.services.clients.business_registry import VALID_CODE, BusinessRegistryClient

logger = logging.getLogger(__name__)


async def _ensure_email_free(db: AsyncSession, email: str) -> None:
    res = await db.execute(select(User.id).where(User.email == email))
    if res.scalars().first() is not None:
        raise conflict("Email is already registered.")


async def _save_user(db: AsyncSession, user: User) -> User:
    db.add(user)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise conflict("Email is already registered.")
    await log_audit(db, user.id, AuditAction.SIGNUP, {"email": user.email, "role": str(user.role)})
    await db.commit()
    logger.info(f"{user.role} account {user.id} registered")
    return user


async def signup_shipper(db: AsyncSession, req: ShipperSignupIn, registry: BusinessRegistryClient) -> User:
    email = req.email.lower()
    await _ensure_email_free(db, email)

    business = {
        "b_no": req.biz_reg_no.replace("-", ""),
        "start_dt": req.open_date,
        "p_nm": req.owner_name or req.name,
        "b_nm": req.company_name,
        "b_adr": req.address,
    }
    code = await registry.validate(business)
    if code != VALID_CODE:
        logger.warning(f"Business registration {business['b_no']} rejected with code {code}")
        raise invalid_input("Business registration number could not be verified.")

    user = User.create(
        email=email,
        password_hash=hash_password(req.password),
        role=UserRole.SHIPPER,
        name=req.name,
        phone=req.phone,
        address=req.address,
        address_detail=req.address_detail,
        company_name=req.company_name,
        biz_reg_no=req.biz_reg_no,
        biz_phone=req.biz_phone,
    )
    return await _save_user(db, user)


async def signup_driver(db: AsyncSession, req: DriverSignupIn) -> User:
    email = req.email.lower()
    await _ensure_email_free(db, email)

    user = User.create(
        email=email,
        password_hash=hash_password(req.password),
        role=UserRole.DRIVER,
        name=req.name,
        phone=req.phone,
        address=req.address,
        address_detail=req.address_detail,
        bank_name=req.bank_name,
        bank_account=req.bank_account,
        license_verified=False,
    )
    return await _save_user(db, user)


async def login(db: AsyncSession, req: LoginIn) -> TokenOut:
    res = await db.execute(select(User).where(User.email == req.email.lower()))
    user = res.scalars().first()
    if not user or user.role != req.role or not verify_password(req.password, user.password_hash):
        raise FreightError(ErrorKind.UNAUTHORIZED, "Invalid credentials")

    await log_audit(db, user.id, AuditAction.LOGIN, {"email": user.email})
    await db.commit()

    token = create_access_token(user.id, user.role)
    return TokenOut(access_token=token, expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60)
