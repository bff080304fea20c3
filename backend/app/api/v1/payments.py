"""
Payment endpoints.

Endpoints:
- POST /api/payment/verify-payment - Verify a gateway payment and extend the plan
- GET /api/payment - List recorded payments (super-admin)
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.core.deps import require_organization, require_super_admin
from app.core.identity import Principal
from app.core.tenancy import paginate
from app.models.organization import Organization
from app.models.plan import Payment, PaymentStatus
from app.schemas.common import Envelope, PaginatedResponse, ok
from app.schemas.plan import PaymentVerify, PaymentResponse, PaymentVerified
from app.services import payments

router = APIRouter()


@router.post("/verify-payment", response_model=Envelope[PaymentVerified])
async def verify_payment(
    body: PaymentVerify,
    principal: Principal = Depends(require_organization),
    db: AsyncSession = Depends(get_db),
):
    payment = await payments.verify_and_activate(
        db,
        organization_id=principal.id,
        plan_id=body.plan_id,
        order_id=body.order_id,
        payment_id=body.payment_id,
        signature=body.signature,
        amount=body.amount,
    )
    organization = await db.get(Organization, principal.id)
    return ok(
        PaymentVerified(
            payment=PaymentResponse.model_validate(payment),
            plan_expire_date=organization.plan_expire_date,
        ),
        "Payment verified successfully",
    )


@router.get("", response_model=Envelope[PaginatedResponse[PaymentResponse]])
async def list_payments(
    page: int = Query(1, ge=1),
    perPage: int = Query(50, ge=1, le=100),
    organization_id: Optional[str] = Query(None),
    status: Optional[PaymentStatus] = Query(None),
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    query = select(Payment)
    if organization_id:
        query = query.where(Payment.organization_id == organization_id)
    if status:
        query = query.where(Payment.status == status)

    page_data = await paginate(db, query, Payment.created.desc(), page, perPage)
    page_data["items"] = [PaymentResponse.model_validate(p) for p in page_data["items"]]
    return ok(page_data, "Payments fetched successfully")
