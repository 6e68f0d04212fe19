from dataclasses import dataclass
from datetime import datetime, timezone, timedelta

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext

from freight.core.config import settings
from freight.core.enums import UserRole
from freight.core.errors import ErrorKind, FreightError, forbidden

JWT_ALGORITHM = "HS256"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


@dataclass(frozen=True)
class Principal:
    """Authenticated caller passed explicitly into every core operation."""
    id: int
    role: UserRole

    @property
    def is_shipper(self) -> bool:
        return self.role == UserRole.SHIPPER

    @property
    def is_driver(self) -> bool:
        return self.role == UserRole.DRIVER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception:
        return False

def create_access_token(subject, role, expires_minutes: int | None = None) -> str:
    expires = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire_dt = datetime.now(timezone.utc) + timedelta(minutes=expires)
    to_encode = {"sub": str(subject), "role": str(role), "exp": expire_dt}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=JWT_ALGORITHM)

def decode_access_token(token: str) -> Principal:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise FreightError(ErrorKind.UNAUTHORIZED, "Invalid token.")
    subject = payload.get("sub")
    role = payload.get("role")
    try:
        return Principal(id=int(subject), role=UserRole(role))
    except (TypeError, ValueError):
        raise FreightError(ErrorKind.UNAUTHORIZED, "Invalid token.")

async def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    return decode_access_token(token)

def require_role(*roles: UserRole):
    allowed = set(roles)

    async def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise forbidden(f"{'/'.join(str(r) for r in roles)} access required")
        return principal

    return dependency

require_shipper = require_role(UserRole.SHIPPER)
require_driver = require_role(UserRole.DRIVER)
require_admin = require_role(UserRole.ADMIN)
