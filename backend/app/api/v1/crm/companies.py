"""
Company endpoints for CRM module.

Permissions: company.read / company.create / company.update / company.delete
"""
from typing import Optional
from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.db.base import get_db
from app.core.deps import AccessContext, require_permission
from app.core.tenancy import (
    scoped, get_scoped_or_404, ensure_in_tenant, stamp_create, stamp_update,
    apply_updates, paginate,
)
from app.models.base import RecordStatus
from app.models.company import Company
from app.models.team_member import TeamMember
from app.schemas.common import Envelope, PaginatedResponse, StatusUpdate, ok
from app.schemas.crm import CompanyCreate, CompanyUpdate, CompanyResponse

router = APIRouter()


@router.get("", response_model=Envelope[PaginatedResponse[CompanyResponse]])
async def list_companies(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    status: int = Query(RecordStatus.ACTIVE, ge=0, le=1),
    search: Optional[str] = Query(None, description="Search name/email"),
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("company.read")),
):
    query = scoped(select(Company), Company, ctx.tenant_scope).where(Company.status == status)
    if search:
        query = query.where(
            Company.name.ilike(f"%{search}%") | Company.email.ilike(f"%{search}%")
        )

    page_data = await paginate(db, query, Company.created.desc(), page, perPage)
    page_data["items"] = [CompanyResponse.model_validate(c) for c in page_data["items"]]
    return ok(page_data, "Companies fetched successfully")


@router.post("", response_model=Envelope[CompanyResponse], status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("company.create", check_plan=True)),
):
    tenant_scope = ctx.require_tenant()
    await ensure_in_tenant(db, tenant_scope, {TeamMember: company_data.owner_id})

    company = Company(organization_id=tenant_scope, **company_data.model_dump())
    stamp_create(company, ctx)
    db.add(company)
    await db.flush()
    await db.refresh(company)
    return ok(CompanyResponse.model_validate(company), "Company created successfully")


@router.get("/{company_id}", response_model=Envelope[CompanyResponse])
async def get_company(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("company.read")),
):
    company = await get_scoped_or_404(db, Company, company_id, ctx.tenant_scope, "Company")
    return ok(CompanyResponse.model_validate(company))


@router.put("/{company_id}", response_model=Envelope[CompanyResponse])
async def update_company(
    company_id: str,
    company_data: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("company.update")),
):
    tenant_scope = ctx.require_tenant()
    company = await get_scoped_or_404(db, Company, company_id, tenant_scope, "Company")
    changes = company_data.model_dump(exclude_unset=True, exclude_none=True)
    await ensure_in_tenant(db, tenant_scope, {TeamMember: changes.get("owner_id")})

    apply_updates(company, changes)
    stamp_update(company, ctx)
    await db.flush()
    await db.refresh(company)
    return ok(CompanyResponse.model_validate(company), "Company updated successfully")


@router.put("/{company_id}/status", response_model=Envelope[CompanyResponse])
async def update_company_status(
    company_id: str,
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    ctx: AccessContext = Depends(require_permission("company.delete")),
):
    tenant_scope = ctx.require_tenant()
    company = await get_scoped_or_404(db, Company, company_id, tenant_scope, "Company")
    company.status = status_data.status
    stamp_update(company, ctx)
    await db.flush()
    await db.refresh(company)
    return ok(CompanyResponse.model_validate(company), "Company status updated successfully")
