"""
Tests for subscription plans, payment verification and plan enforcement.
"""
import pytest
import pytest_asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from httpx import AsyncClient
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.organization import Organization
from app.models.plan import Payment, Plan
from app.services.payments import expected_signature


@pytest_asyncio.fixture
async def plan_id(db_session: AsyncSession) -> str:
    plan = Plan(title="Monthly", price=Decimal("499.00"), description="30 days", duration=30)
    db_session.add(plan)
    await db_session.commit()
    return plan.id


def as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def parse_datetime(value: str) -> datetime:
    return as_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def payment_body(plan_id: str, payment_id: str = "pay_001", order_id: str = "order_001") -> dict:
    return {
        "order_id": order_id,
        "payment_id": payment_id,
        "signature": expected_signature(order_id, payment_id, settings.PAYMENT_KEY_SECRET),
        "plan_id": plan_id,
        "amount": "499.00",
    }


class TestPlans:

    @pytest.mark.asyncio
    async def test_super_admin_manages_plans(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/plan",
            json={"title": "Yearly", "price": "4999.00", "duration": 365},
            headers=admin_headers,
        )
        assert response.status_code == 201
        new_plan_id = response.json()["data"]["id"]

        response = await client.put(f"/api/plan/{new_plan_id}", json={"price": "3999.00"}, headers=admin_headers)
        assert Decimal(str(response.json()["data"]["price"])) == Decimal("3999.00")

        response = await client.get("/api/plan")
        assert [p["id"] for p in response.json()["data"]] == [new_plan_id]

        response = await client.put(f"/api/plan/{new_plan_id}/status", json={"status": 0}, headers=admin_headers)
        assert response.status_code == 200

        response = await client.get("/api/plan")
        assert response.json()["data"] == []

    @pytest.mark.asyncio
    async def test_organization_cannot_create_plan(self, client: AsyncClient, org_headers: dict):
        response = await client.post(
            "/api/plan", json={"title": "Free", "price": "0", "duration": 3650}, headers=org_headers
        )
        assert response.status_code == 403


class TestPaymentVerification:

    @pytest.mark.asyncio
    async def test_valid_payment_extends_plan(
        self, client: AsyncClient, org_headers: dict, plan_id: str
    ):
        before = datetime.now(timezone.utc)
        response = await client.post("/api/payment/verify-payment", json=payment_body(plan_id), headers=org_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["payment"]["status"] == "paid"

        expires = parse_datetime(data["plan_expire_date"])
        assert before + timedelta(days=29) < expires < before + timedelta(days=31)

    @pytest.mark.asyncio
    async def test_bad_signature(self, client: AsyncClient, org_headers: dict, plan_id: str):
        body = payment_body(plan_id)
        body["signature"] = "0" * 64
        response = await client.post("/api/payment/verify-payment", json=body, headers=org_headers)
        assert response.status_code == 400
        assert response.json()["message"] == "Payment verification failed!"

    @pytest.mark.asyncio
    async def test_duplicate_payment(
        self, client: AsyncClient, db_session: AsyncSession, org_headers: dict, test_org: Organization,
        plan_id: str
    ):
        org_id = test_org.id
        response = await client.post("/api/payment/verify-payment", json=payment_body(plan_id), headers=org_headers)
        first_expiry = response.json()["data"]["plan_expire_date"]

        response = await client.post("/api/payment/verify-payment", json=payment_body(plan_id), headers=org_headers)
        assert response.status_code == 409

        count = await db_session.scalar(select(func.count()).select_from(Payment))
        assert count == 1

        organization = await db_session.get(Organization, org_id, populate_existing=True)
        assert as_utc(organization.plan_expire_date) == parse_datetime(first_expiry)

    @pytest.mark.asyncio
    async def test_second_payment_stacks_on_active_plan(
        self, client: AsyncClient, org_headers: dict, plan_id: str
    ):
        before = datetime.now(timezone.utc)
        await client.post("/api/payment/verify-payment", json=payment_body(plan_id), headers=org_headers)
        response = await client.post(
            "/api/payment/verify-payment",
            json=payment_body(plan_id, payment_id="pay_002", order_id="order_002"),
            headers=org_headers,
        )
        assert response.status_code == 200
        expires = parse_datetime(response.json()["data"]["plan_expire_date"])
        assert expires > before + timedelta(days=59)

    @pytest.mark.asyncio
    async def test_unknown_plan(self, client: AsyncClient, org_headers: dict):
        response = await client.post(
            "/api/payment/verify-payment", json=payment_body("noplan123"), headers=org_headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_super_admin_lists_payments(
        self, client: AsyncClient, org_headers: dict, admin_headers: dict, plan_id: str
    ):
        await client.post("/api/payment/verify-payment", json=payment_body(plan_id), headers=org_headers)
        response = await client.get("/api/payment", headers=admin_headers)
        assert response.json()["data"]["totalItems"] == 1


class TestPlanModel:

    def test_extend_from_lapsed_plan_starts_now(self):
        now = datetime(2026, 1, 10, tzinfo=timezone.utc)
        org = Organization(name="x", email="x@example.com", password_hash="h")
        org.plan_expire_date = now - timedelta(days=5)
        assert org.extend_plan(30, now=now) == now + timedelta(days=30)

    def test_extend_active_plan_stacks(self):
        now = datetime(2026, 1, 10, tzinfo=timezone.utc)
        org = Organization(name="x", email="x@example.com", password_hash="h")
        org.plan_expire_date = now + timedelta(days=5)
        assert org.extend_plan(30, now=now) == now + timedelta(days=35)

    def test_no_plan_is_not_valid(self):
        org = Organization(name="x", email="x@example.com", password_hash="h")
        assert not org.has_valid_plan()


class TestPlanEnforcement:

    @pytest.mark.asyncio
    async def test_expired_plan_blocks_creates(
        self, client: AsyncClient, db_session: AsyncSession, org_headers: dict, test_org: Organization,
        monkeypatch
    ):
        monkeypatch.setattr(settings, "ENFORCE_PLAN_VALIDITY", True)
        test_org.plan_expire_date = datetime.now(timezone.utc) - timedelta(days=1)
        await db_session.commit()

        response = await client.post("/api/pipeline", json={"name": "Sales"}, headers=org_headers)
        assert response.status_code == 403
        assert response.json()["message"] == "Plan expired! Renew required."

        response = await client.get("/api/pipeline", headers=org_headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_active_plan_allows_creates(
        self, client: AsyncClient, db_session: AsyncSession, org_headers: dict, test_org: Organization,
        monkeypatch
    ):
        monkeypatch.setattr(settings, "ENFORCE_PLAN_VALIDITY", True)
        test_org.plan_expire_date = datetime.now(timezone.utc) + timedelta(days=10)
        await db_session.commit()

        response = await client.post("/api/pipeline", json={"name": "Sales"}, headers=org_headers)
        assert response.status_code == 201
