"""
Team member schemas.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field

from app.models.team_member import TeamMemberRole
from app.schemas.common import BaseResponse


class TeamMemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    full_name: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    password: str = Field(..., min_length=6)
    role: TeamMemberRole = TeamMemberRole.SALES


class TeamMemberProfileUpdate(BaseModel):
    """Self-service profile edit. ``organization_id`` is never accepted."""
    full_name: Optional[str] = Field(None, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)
    domain_name: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, min_length=6)

    class Config:
        extra = "forbid"


class TeamMemberStatusUpdate(BaseModel):
    team_member_id: str
    status: int = Field(..., ge=0, le=1)


class TeamMemberPasswordReset(BaseModel):
    team_member_id: str
    new_password: str = Field(..., min_length=6)


class TeamMemberInvite(BaseModel):
    email: EmailStr
    role: TeamMemberRole = TeamMemberRole.SALES


class TeamMemberRegister(BaseModel):
    token: str
    name: str = Field(..., min_length=1, max_length=200)
    email: EmailStr
    password: str = Field(..., min_length=6)


class TeamMemberResponse(BaseResponse):
    organization_id: str
    name: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    domain_name: Optional[str] = None
    role: TeamMemberRole
    status: int
