"""
Tests for the permission catalog: definitions, assignments, and the
``/permission`` and ``/assign-permission`` endpoints.
"""
import pytest
from types import SimpleNamespace
from httpx import AsyncClient
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import Conflict, InvalidFormat, NotFound
from app.db.base import flush_or_conflict, is_unique_violation
from app.models.organization import Organization
from app.models.permission import Permission, TeamMemberPermission, is_valid_permission_name
from app.models.team_member import TeamMember
from app.services import permission_catalog


@pytest.mark.parametrize("name", ["lead.create", "lead.read", "Company2.update", "x.delete"])
def test_valid_permission_names(name):
    assert is_valid_permission_name(name)


@pytest.mark.parametrize("name", ["", "lead", "lead.write", ".read", "lead.read.extra", "le ad.read", "lead-x.read"])
def test_invalid_permission_names(name):
    assert not is_valid_permission_name(name)


class TestCatalogService:

    @pytest.mark.asyncio
    async def test_define_and_duplicate(self, db_session: AsyncSession):
        await permission_catalog.define(db_session, "lead.create", "Create leads")
        await db_session.commit()

        with pytest.raises(Conflict):
            await permission_catalog.define(db_session, "lead.create")

    @pytest.mark.asyncio
    async def test_define_rejects_bad_name(self, db_session: AsyncSession):
        with pytest.raises(InvalidFormat):
            await permission_catalog.define(db_session, "lead.write")

    @pytest.mark.asyncio
    async def test_define_many_is_all_or_nothing(self, db_session: AsyncSession):
        with pytest.raises(InvalidFormat) as exc:
            await permission_catalog.define_many(
                db_session, [("lead.read", ""), ("lead.write", ""), ("bad", "")]
            )
        assert exc.value.data == {"invalid": ["lead.write", "bad"]}
        count = await db_session.scalar(select(func.count()).select_from(Permission))
        assert count == 0

    @pytest.mark.asyncio
    async def test_assign_twice_conflicts_and_keeps_one_row(
        self, db_session: AsyncSession, test_org: Organization, test_team_member: TeamMember
    ):
        org_id, member_id = test_org.id, test_team_member.id
        permission = await permission_catalog.define(db_session, "lead.read")
        await db_session.commit()
        permission_id = permission.id

        await permission_catalog.assign(db_session, org_id, member_id, permission_id)
        await db_session.commit()
        with pytest.raises(Conflict):
            await permission_catalog.assign(db_session, org_id, member_id, permission_id)

        count = await db_session.scalar(
            select(func.count()).select_from(TeamMemberPermission).where(
                TeamMemberPermission.team_member_id == member_id
            )
        )
        assert count == 1

    @pytest.mark.asyncio
    async def test_assign_to_other_tenants_member(
        self, db_session: AsyncSession, other_org: Organization, test_team_member: TeamMember
    ):
        permission = await permission_catalog.define(db_session, "lead.read")
        await db_session.commit()
        with pytest.raises(NotFound):
            await permission_catalog.assign(db_session, other_org.id, test_team_member.id, permission.id)

    @pytest.mark.asyncio
    async def test_effective_permissions(
        self, db_session: AsyncSession, test_team_member: TeamMember, grant
    ):
        await grant(test_team_member.id, "lead.read")
        await grant(test_team_member.id, "meeting.create")
        names = await permission_catalog.effective_permission_names(db_session, test_team_member.id)
        assert names == frozenset({"lead.read", "meeting.create"})


class TestPermissionEndpoints:

    @pytest.mark.asyncio
    async def test_super_admin_defines_one(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/permission",
            json={"name": "lead.create", "description": "Create leads"},
            headers=admin_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["data"]["name"] == "lead.create"

    @pytest.mark.asyncio
    async def test_super_admin_defines_many(self, client: AsyncClient, admin_headers: dict):
        response = await client.post(
            "/api/permission",
            json=[{"name": "lead.read"}, {"name": "lead.update"}],
            headers=admin_headers,
        )
        assert response.status_code == 201
        assert sorted(p["name"] for p in response.json()["data"]) == ["lead.read", "lead.update"]

    @pytest.mark.asyncio
    async def test_duplicate_is_conflict(self, client: AsyncClient, admin_headers: dict):
        await client.post("/api/permission", json={"name": "lead.read"}, headers=admin_headers)
        response = await client.post("/api/permission", json={"name": "lead.read"}, headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_bad_name_is_400(self, client: AsyncClient, admin_headers: dict):
        response = await client.post("/api/permission", json={"name": "lead.write"}, headers=admin_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_organization_cannot_define(self, client: AsyncClient, org_headers: dict):
        response = await client.post("/api/permission", json={"name": "lead.read"}, headers=org_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_organization_can_list(self, client: AsyncClient, admin_headers: dict, org_headers: dict):
        await client.post("/api/permission", json={"name": "lead.read"}, headers=admin_headers)
        response = await client.get("/api/permission", headers=org_headers)
        assert response.status_code == 200
        assert [p["name"] for p in response.json()["data"]] == ["lead.read"]

    @pytest.mark.asyncio
    async def test_delete_removes_assignments(
        self, client: AsyncClient, db_session: AsyncSession, admin_headers: dict,
        test_team_member: TeamMember, grant
    ):
        member_id = test_team_member.id
        assignment = await grant(member_id, "lead.read")
        permission_id = assignment.permission_id

        response = await client.delete(f"/api/permission/{permission_id}", headers=admin_headers)
        assert response.status_code == 200

        names = await permission_catalog.effective_permission_names(db_session, member_id)
        assert names == frozenset()


class TestAssignmentEndpoints:

    @pytest.mark.asyncio
    async def test_assign_list_revoke(
        self, client: AsyncClient, db_session: AsyncSession, org_headers: dict,
        test_team_member: TeamMember
    ):
        member_id = test_team_member.id
        permission = await permission_catalog.define(db_session, "lead.read")
        await db_session.commit()

        response = await client.post(
            "/api/assign-permission",
            json={"team_member_id": member_id, "permission_id": permission.id},
            headers=org_headers,
        )
        assert response.status_code == 201
        assignment_id = response.json()["data"]["id"]
        assert response.json()["data"]["permission_name"] == "lead.read"

        response = await client.post(
            "/api/assign-permission",
            json={"team_member_id": member_id, "permission_id": permission.id},
            headers=org_headers,
        )
        assert response.status_code == 409

        response = await client.get(
            f"/api/assign-permission?team_member_id={member_id}", headers=org_headers
        )
        assert [a["id"] for a in response.json()["data"]] == [assignment_id]

        response = await client.delete(f"/api/assign-permission/{assignment_id}", headers=org_headers)
        assert response.status_code == 200

        response = await client.get(f"/api/assign-permission/{assignment_id}", headers=org_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_other_tenant_sees_404(
        self, client: AsyncClient, other_org_headers: dict, test_team_member: TeamMember, grant
    ):
        assignment = await grant(test_team_member.id, "lead.read")
        response = await client.get(f"/api/assign-permission/{assignment.id}", headers=other_org_headers)
        assert response.status_code == 404

        response = await client.delete(f"/api/assign-permission/{assignment.id}", headers=other_org_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_team_member_cannot_assign(
        self, client: AsyncClient, member_headers: dict, test_team_member: TeamMember
    ):
        response = await client.post(
            "/api/assign-permission",
            json={"team_member_id": test_team_member.id, "permission_id": "whatever"},
            headers=member_headers,
        )
        assert response.status_code == 403


class TestIntegrityErrorMapping:

    @pytest.mark.asyncio
    async def test_unique_violation_is_conflict(self, db_session: AsyncSession):
        db_session.add(Permission(name="lead.read", description=""))
        await db_session.commit()

        db_session.add(Permission(name="lead.read", description=""))
        with pytest.raises(Conflict):
            await flush_or_conflict(db_session, "Permission already exists")

    @pytest.mark.asyncio
    async def test_not_null_violation_is_not_conflict(self, db_session: AsyncSession):
        db_session.add(Permission(name=None, description=""))
        with pytest.raises(IntegrityError):
            await flush_or_conflict(db_session, "Permission already exists")

    @pytest.mark.parametrize("orig, expected", [
        (SimpleNamespace(sqlstate="23505"), True),
        (SimpleNamespace(sqlstate="23503"), False),
        (SimpleNamespace(pgcode="23502"), False),
        (Exception("UNIQUE constraint failed: permissions.name"), True),
        (Exception("FOREIGN KEY constraint failed"), False),
    ])
    def test_is_unique_violation(self, orig, expected):
        assert is_unique_violation(IntegrityError("INSERT ...", {}, orig)) is expected
