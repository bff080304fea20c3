"""
Plan and payment schemas.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field

from app.models.plan import PaymentStatus
from app.schemas.common import BaseResponse


class PlanCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = Field(None, max_length=5000)
    duration: int = Field(..., ge=1, description="Duration in days")


class PlanUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=5000)
    duration: Optional[int] = Field(None, ge=1)


class PlanResponse(BaseResponse):
    title: str
    price: Decimal
    description: Optional[str] = None
    duration: int
    status: int


class PaymentVerify(BaseModel):
    order_id: str
    payment_id: str
    signature: str
    plan_id: str
    amount: Decimal = Field(..., ge=0)


class PaymentResponse(BaseResponse):
    organization_id: str
    plan_id: str
    gateway_order_id: str
    gateway_payment_id: str
    amount: Decimal
    status: PaymentStatus


class PaymentVerified(BaseModel):
    payment: PaymentResponse
    plan_expire_date: datetime
