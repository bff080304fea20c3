"""
Subscription plan endpoints.

Anyone can read active plans; only super-admins change them.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import get_db
from app.core.deps import require_super_admin
from app.core.exceptions import NotFound
from app.core.identity import Principal
from app.models.base import RecordStatus
from app.models.plan import Plan
from app.schemas.common import Envelope, StatusUpdate, ok
from app.schemas.plan import PlanCreate, PlanUpdate, PlanResponse

router = APIRouter()


async def _get_plan(db: AsyncSession, plan_id: str) -> Plan:
    plan = await db.get(Plan, plan_id)
    if plan is None:
        raise NotFound("Plan not found")
    return plan


@router.get("", response_model=Envelope[list[PlanResponse]])
async def list_plans(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(Plan).where(Plan.status == RecordStatus.ACTIVE).order_by(Plan.price)
    )
    return ok([PlanResponse.model_validate(p) for p in result.scalars().all()], "Plans fetched successfully")


@router.post("", response_model=Envelope[PlanResponse], status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_data: PlanCreate,
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    plan = Plan(**plan_data.model_dump())
    db.add(plan)
    await db.flush()
    await db.refresh(plan)
    return ok(PlanResponse.model_validate(plan), "Plan created successfully")


@router.get("/{plan_id}", response_model=Envelope[PlanResponse])
async def get_plan(plan_id: str, db: AsyncSession = Depends(get_db)):
    plan = await _get_plan(db, plan_id)
    return ok(PlanResponse.model_validate(plan))


@router.put("/{plan_id}", response_model=Envelope[PlanResponse])
async def update_plan(
    plan_id: str,
    plan_data: PlanUpdate,
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    plan = await _get_plan(db, plan_id)
    for field, value in plan_data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(plan, field, value)
    await db.flush()
    await db.refresh(plan)
    return ok(PlanResponse.model_validate(plan), "Plan updated successfully")


@router.put("/{plan_id}/status", response_model=Envelope[PlanResponse])
async def update_plan_status(
    plan_id: str,
    status_data: StatusUpdate,
    principal: Principal = Depends(require_super_admin),
    db: AsyncSession = Depends(get_db),
):
    plan = await _get_plan(db, plan_id)
    plan.status = status_data.status
    await db.flush()
    await db.refresh(plan)
    return ok(PlanResponse.model_validate(plan), "Plan status updated successfully")
