"""
Permission catalog schemas.
"""
from typing import Optional
from pydantic import BaseModel, Field

from app.schemas.common import BaseResponse


class PermissionCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str = ""


class PermissionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=3, max_length=100)
    description: Optional[str] = None


class PermissionResponse(BaseResponse):
    name: str
    description: str


class AssignmentCreate(BaseModel):
    team_member_id: str
    permission_id: str


class AssignmentUpdate(BaseModel):
    permission_id: str


class AssignmentResponse(BaseResponse):
    team_member_id: str
    permission_id: str
    permission_name: Optional[str] = None
