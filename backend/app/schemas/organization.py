"""
Organization schemas.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import BaseResponse


class SendOtpRequest(BaseModel):
    email: EmailStr


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=4, max_length=10)


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    pin_code: Optional[str] = Field(None, pattern=r"^[1-9][0-9]{5}$")
    address: Optional[str] = Field(None, max_length=500)


class OrganizationUpdate(BaseModel):
    """Editable fields. Plan fields are deliberately absent."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    pin_code: Optional[str] = Field(None, pattern=r"^[1-9][0-9]{5}$")
    address: Optional[str] = Field(None, max_length=500)

    class Config:
        extra = "forbid"


class OrganizationResponse(BaseResponse):
    name: str
    email: str
    pin_code: Optional[str] = None
    address: Optional[str] = None
    status: int
    plan_id: Optional[str] = None
    plan_expire_date: Optional[datetime] = None
