from sqlalchemy import Boolean, Column, Enum, String

from freight.core.enums import UserRole
from freight.models.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"
    email = Column(String(120), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False)
    name = Column(String(64), nullable=False)
    phone = Column(String(40))
    address = Column(String(255))
    address_detail = Column(String(255))

    # shipper business profile
    company_name = Column(String(120))
    biz_reg_no = Column(String(20))
    biz_phone = Column(String(40))

    # driver payout profile
    bank_name = Column(String(40))
    bank_account = Column(String(64))
    license_verified = Column(Boolean, nullable=False, default=False)

    @classmethod
    def create(cls, **fields) -> "User":
        user = cls(**fields)
        if user.license_verified is None:
            user.license_verified = False
        user.stamp_created()
        return user
