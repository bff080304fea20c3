"""
Pydantic schemas for CRM module.

Includes schemas for Companies, Contacts, Categories, Products, Pipelines,
Stages, Meetings, Leads and Notes. ``organization_id`` and the
``*_by`` stamps are never accepted from clients; they come from the
authenticated principal.
"""
from typing import Optional
from datetime import datetime, date
from decimal import Decimal
from pydantic import BaseModel, Field

from app.models.base import ActorKind
from app.models.meeting import MeetingStatus, MeetingType
from app.models.pipeline import StageType
from app.schemas.common import BaseResponse


class TenantRecordResponse(BaseResponse):
    organization_id: str
    status: int
    created_by: str
    updated_by: str


# ============================================================================
# COMPANY SCHEMAS
# ============================================================================

class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    website: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=20)
    gst_no: Optional[str] = Field(None, max_length=50)
    owner_id: Optional[str] = None


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    website: Optional[str] = Field(None, max_length=500)
    address: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=20)
    gst_no: Optional[str] = Field(None, max_length=50)
    owner_id: Optional[str] = None


class CompanyResponse(TenantRecordResponse):
    name: str
    description: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    gst_no: Optional[str] = None
    owner_id: Optional[str] = None


# ============================================================================
# CONTACT SCHEMAS
# ============================================================================

class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=255)
    phone_numbers: list[str] = Field(default_factory=list)
    title: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=20)
    company_id: Optional[str] = None
    owner_id: Optional[str] = None


class ContactUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[str] = Field(None, max_length=255)
    phone_numbers: Optional[list[str]] = None
    title: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = None
    pincode: Optional[str] = Field(None, max_length=20)
    company_id: Optional[str] = None
    owner_id: Optional[str] = None


class ContactResponse(TenantRecordResponse):
    name: str
    email: Optional[str] = None
    phone_numbers: list[str] = []
    title: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    company_id: Optional[str] = None
    owner_id: Optional[str] = None


# ============================================================================
# CATEGORY / PRODUCT SCHEMAS
# ============================================================================

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class CategoryResponse(TenantRecordResponse):
    name: str
    description: Optional[str] = None


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=100)
    category_id: Optional[str] = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    commission_rate: Decimal = Field(default=Decimal("0"), ge=0)
    stock_quantity: int = Field(default=0, ge=0)
    tentative_date: Optional[date] = None
    description: Optional[str] = None
    owner_id: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=100)
    category_id: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    tax: Optional[Decimal] = Field(None, ge=0)
    commission_rate: Optional[Decimal] = Field(None, ge=0)
    stock_quantity: Optional[int] = Field(None, ge=0)
    tentative_date: Optional[date] = None
    description: Optional[str] = None
    owner_id: Optional[str] = None


class ProductResponse(TenantRecordResponse):
    name: str
    code: Optional[str] = None
    category_id: Optional[str] = None
    price: Decimal
    tax: Decimal
    commission_rate: Decimal
    stock_quantity: int
    tentative_date: Optional[date] = None
    description: Optional[str] = None
    owner_id: Optional[str] = None


# ============================================================================
# PIPELINE / STAGE SCHEMAS
# ============================================================================

class PipelineCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None


class PipelineUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None


class PipelineResponse(TenantRecordResponse):
    name: str
    description: Optional[str] = None


class StageCreate(BaseModel):
    pipeline_id: str
    name: str = Field(..., min_length=1, max_length=200)
    serial_number: int = Field(default=0, ge=0)
    stage_type: StageType = StageType.OPEN


class StageUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    serial_number: Optional[int] = Field(None, ge=0)
    stage_type: Optional[StageType] = None


class StageResponse(TenantRecordResponse):
    pipeline_id: str
    name: str
    serial_number: int
    stage_type: StageType


# ============================================================================
# MEETING SCHEMAS
# ============================================================================

class MeetingCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    starts_at: datetime
    ends_at: datetime
    meeting_type: MeetingType
    location: str = Field(..., min_length=1, max_length=500)
    meeting_status: MeetingStatus = MeetingStatus.SCHEDULED
    description: Optional[str] = None


class MeetingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    meeting_type: Optional[MeetingType] = None
    location: Optional[str] = Field(None, min_length=1, max_length=500)
    meeting_status: Optional[MeetingStatus] = None
    description: Optional[str] = None


class MeetingResponse(TenantRecordResponse):
    title: str
    starts_at: datetime
    ends_at: datetime
    meeting_type: MeetingType
    meeting_status: MeetingStatus
    location: str
    description: Optional[str] = None
    created_by_kind: ActorKind
    updated_by_kind: ActorKind


# ============================================================================
# LEAD SCHEMAS
# ============================================================================

class LeadCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    pipeline_id: str
    stage_id: str
    assigned_to: Optional[str] = None
    product_id: Optional[str] = None
    company_id: Optional[str] = None
    contact_id: Optional[str] = None
    meeting_id: Optional[str] = None
    amount: Decimal = Field(..., ge=0)
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    discount: Decimal = Field(default=Decimal("0"), ge=0)


class LeadUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    pipeline_id: Optional[str] = None
    stage_id: Optional[str] = None
    assigned_to: Optional[str] = None
    product_id: Optional[str] = None
    company_id: Optional[str] = None
    contact_id: Optional[str] = None
    meeting_id: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    tax: Optional[Decimal] = Field(None, ge=0)
    discount: Optional[Decimal] = Field(None, ge=0)


class LeadResponse(TenantRecordResponse):
    name: str
    description: Optional[str] = None
    pipeline_id: str
    stage_id: str
    assigned_to: Optional[str] = None
    product_id: Optional[str] = None
    company_id: Optional[str] = None
    contact_id: Optional[str] = None
    meeting_id: Optional[str] = None
    amount: Decimal
    tax: Decimal
    discount: Decimal
    created_by_kind: ActorKind
    updated_by_kind: ActorKind


# ============================================================================
# NOTE SCHEMAS
# ============================================================================

class NoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = None
    module: str = Field(..., min_length=1, max_length=50)
    module_id: str


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=300)
    description: Optional[str] = None


class NoteResponse(TenantRecordResponse):
    title: str
    description: Optional[str] = None
    module: str
    module_id: str
