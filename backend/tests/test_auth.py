"""
Tests for token introspection, caller details, static data and the envelope
on errors.
"""
import json
import pytest
from datetime import timedelta
from fastapi import Request
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, settings
from app.core.security import ROLE_TEAM_MEMBER, create_access_token
from app.models.base import RecordStatus
from app.models.organization import Organization
from app.models.team_member import TeamMember
from app.main import global_exception_handler


class TestVerifyToken:

    @pytest.mark.asyncio
    async def test_team_member_token(self, client: AsyncClient, test_team_member: TeamMember):
        member_id, org_id = test_team_member.id, test_team_member.organization_id
        token = create_access_token(subject=member_id, role=ROLE_TEAM_MEMBER)
        response = await client.post("/api/auth/verify-token", json={"token": token})
        assert response.status_code == 200
        assert response.json()["data"] == {
            "valid": True,
            "role": "team_member",
            "id": member_id,
            "organization_id": org_id,
        }

    @pytest.mark.asyncio
    async def test_expired_token(self, client: AsyncClient, test_org: Organization):
        token = create_access_token(subject=test_org.id, expires_delta=timedelta(seconds=-5))
        response = await client.post("/api/auth/verify-token", json={"token": token})
        assert response.status_code == 401
        assert response.json()["message"] == "Token expired"

    @pytest.mark.asyncio
    async def test_unknown_principal(self, client: AsyncClient):
        token = create_access_token(subject="ghost0000000000")
        response = await client.post("/api/auth/verify-token", json={"token": token})
        assert response.status_code == 401


class TestUserDetails:

    @pytest.mark.asyncio
    async def test_organization(self, client: AsyncClient, org_headers: dict, test_org: Organization):
        org_id = test_org.id
        response = await client.get("/api/user-details", headers=org_headers)
        assert response.status_code == 200
        assert response.json()["data"] == {
            "role": "organization",
            "id": org_id,
            "name": "Acme Sales",
            "email": "owner@acme.com",
            "phone": None,
            "contact_number": None,
        }

    @pytest.mark.asyncio
    async def test_team_member(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        member_headers: dict,
        test_team_member: TeamMember,
    ):
        test_team_member.phone = "+91 98450 00000"
        await db_session.commit()

        response = await client.get("/api/user-details", headers=member_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["role"] == "team_member"
        assert data["name"] == "tm1"
        assert data["email"] == "tm1@acme.com"
        assert data["phone"] == data["contact_number"] == "+91 98450 00000"

    @pytest.mark.asyncio
    async def test_super_admin(self, client: AsyncClient, admin_headers: dict):
        response = await client.get("/api/user-details", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["role"] == "superadmin"

    @pytest.mark.asyncio
    async def test_inactive_team_member(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        member_headers: dict,
        test_team_member: TeamMember,
    ):
        test_team_member.status = RecordStatus.INACTIVE
        await db_session.commit()

        response = await client.get("/api/user-details", headers=member_headers)
        assert response.status_code == 401
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient):
        response = await client.get("/api/user-details")
        assert response.status_code == 401


class TestStaticAndHealth:

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["message"] == "API is healthy."

    @pytest.mark.asyncio
    async def test_modules_require_auth(self, client: AsyncClient):
        response = await client.get("/api/static/modules")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_modules(self, client: AsyncClient, member_headers: dict):
        response = await client.get("/api/static/modules", headers=member_headers)
        assert response.status_code == 200
        assert "lead" in response.json()["data"]

    @pytest.mark.asyncio
    async def test_unknown_route_uses_envelope(self, client: AsyncClient):
        response = await client.get("/api/nope")
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestUnhandledErrors:
    """Unexpected exceptions are logged, never echoed outside debug runs."""

    @staticmethod
    def request() -> Request:
        return Request({"type": "http", "method": "GET", "path": "/api/lead", "headers": []})

    def test_debug_off_by_default(self):
        assert Settings.model_fields["DEBUG"].default is False

    @pytest.mark.asyncio
    async def test_message_hidden(self, monkeypatch):
        monkeypatch.setattr(settings, "DEBUG", False)
        response = await global_exception_handler(self.request(), RuntimeError("password=hunter2"))
        assert response.status_code == 500
        body = json.loads(response.body)
        assert body == {"success": False, "message": "Internal server error", "data": None}

    @pytest.mark.asyncio
    async def test_message_hidden_in_production_even_with_debug(self, monkeypatch):
        monkeypatch.setattr(settings, "DEBUG", True)
        monkeypatch.setattr(settings, "APP_ENV", "production")
        response = await global_exception_handler(self.request(), RuntimeError("password=hunter2"))
        assert json.loads(response.body)["message"] == "Internal server error"

    @pytest.mark.asyncio
    async def test_message_shown_in_development_debug(self, monkeypatch):
        monkeypatch.setattr(settings, "DEBUG", True)
        monkeypatch.setattr(settings, "APP_ENV", "development")
        response = await global_exception_handler(self.request(), RuntimeError("boom"))
        assert json.loads(response.body)["message"] == "boom"
