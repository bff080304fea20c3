"""
Common schemas used across the application.
"""
from typing import Generic, TypeVar, Optional
from pydantic import BaseModel, Field
from datetime import datetime

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Standard response wrapper: ``{success, message, data}``."""
    success: bool = True
    message: str = ""
    data: Optional[T] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """Paginated list payload."""
    page: int
    perPage: int
    totalItems: int
    totalPages: int
    items: list[T]


class HealthResponse(BaseModel):
    code: int = 200
    message: str = "API is healthy."


class BaseResponse(BaseModel):
    """Base response with common fields."""
    id: str
    created: datetime
    updated: datetime

    class Config:
        from_attributes = True


class StatusUpdate(BaseModel):
    """Soft delete / restore payload."""
    status: int = Field(..., ge=0, le=1)


def ok(data=None, message: str = "") -> dict:
    return {"success": True, "message": message, "data": data}
