from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from freight.core.enums import UserRole


class ShipperSignupIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None
    address_detail: Optional[str] = None
    company_name: str = Field(min_length=1)
    biz_reg_no: str = Field(min_length=10, max_length=20)
    biz_phone: Optional[str] = None
    open_date: Optional[str] = None
    owner_name: Optional[str] = None


class DriverSignupIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1)
    phone: Optional[str] = None
    address: Optional[str] = None
    address_detail: Optional[str] = None
    bank_name: Optional[str] = None
    bank_account: Optional[str] = None


class SignupOut(BaseModel):
    id: int
    role: UserRole


class LoginIn(BaseModel):
    email: EmailStr
    password: str
    role: UserRole


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
