"""
Plan purchase verification.

Recording the payment and extending the organization's plan happen in one
transaction: both commit or neither does.
"""
import hashlib
import hmac
import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AppError, Conflict, InvalidFormat, NotFound
from app.db.base import is_unique_violation
from app.models.base import RecordStatus
from app.models.organization import Organization
from app.models.plan import Payment, PaymentStatus, Plan

logger = logging.getLogger(__name__)


def expected_signature(order_id: str, payment_id: str, secret: str) -> str:
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def verify_signature(order_id: str, payment_id: str, signature: str) -> bool:
    secret = settings.PAYMENT_KEY_SECRET
    if not secret:
        logger.error("PAYMENT_KEY_SECRET is not configured")
        raise AppError("Payment verification is not configured")
    return hmac.compare_digest(expected_signature(order_id, payment_id, secret), signature)


async def verify_and_activate(
    db: AsyncSession,
    organization_id: str,
    plan_id: str,
    order_id: str,
    payment_id: str,
    signature: str,
    amount: Decimal,
) -> Payment:
    """Check the gateway signature, record the payment and extend the plan."""
    if not verify_signature(order_id, payment_id, signature):
        logger.warning("Bad payment signature for org %s payment %s", organization_id, payment_id)
        raise InvalidFormat("Payment verification failed!")

    plan = await db.get(Plan, plan_id)
    if plan is None or plan.status != RecordStatus.ACTIVE:
        raise NotFound("Plan not found")

    organization = await db.get(Organization, organization_id)
    if organization is None:
        raise NotFound("Organization not found")

    try:
        payment = Payment(
            organization_id=organization_id,
            plan_id=plan_id,
            gateway_order_id=order_id,
            gateway_payment_id=payment_id,
            amount=amount,
            status=PaymentStatus.PAID,
        )
        db.add(payment)
        organization.plan_id = plan_id
        organization.extend_plan(plan.duration)
        await db.flush()
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if not is_unique_violation(exc):
            logger.exception("Payment %s could not be recorded; plan left unchanged", payment_id)
            raise
        raise Conflict("Payment already processed!")
    except Exception:
        await db.rollback()
        logger.exception("Payment %s could not be recorded; plan left unchanged", payment_id)
        raise

    logger.info(
        "Payment %s activated plan %s for org %s until %s",
        payment_id, plan_id, organization_id, organization.plan_expire_date,
    )
    return payment
