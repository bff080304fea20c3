"""
Authentication schemas.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenData(BaseModel):
    """Returned by every login endpoint."""
    token: str
    role: str
    id: str
    organization_id: Optional[str] = None


class VerifyTokenRequest(BaseModel):
    token: str


class VerifyTokenData(BaseModel):
    valid: bool = True
    role: str
    id: str
    organization_id: Optional[str] = None


class SuperAdminResponse(BaseModel):
    id: str
    name: str
    email: str

    class Config:
        from_attributes = True


class UserDetails(BaseModel):
    """Contact summary of whoever holds the token."""
    role: str
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    contact_number: Optional[str] = None
