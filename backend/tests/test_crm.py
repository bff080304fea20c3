"""
Tests for CRM module (pipelines, stages, leads, companies, meetings, notes).

Tests cover:
- Permission enforcement for team members (assign -> allowed, revoke -> 403)
- Organization scoping (another tenant's records are 404)
- Deactivated principals are 401, not 403
- Author stamps on created/updated records
"""
import pytest
import pytest_asyncio
from datetime import datetime, timedelta, timezone
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import ROLE_TEAM_MEMBER, create_access_token, get_password_hash
from app.models.base import RecordStatus
from app.models.company import Company
from app.models.organization import Organization
from app.models.pipeline import Pipeline, Stage, StageType
from app.models.team_member import TeamMember


# ========== Fixtures ==========

@pytest_asyncio.fixture
async def pipeline_ids(db_session: AsyncSession, test_org: Organization) -> tuple[str, str]:
    """A pipeline with one open stage in ``test_org``; returns (pipeline_id, stage_id)."""
    pipeline = Pipeline(
        organization_id=test_org.id,
        name="Default",
        created_by=test_org.id,
        updated_by=test_org.id,
    )
    db_session.add(pipeline)
    await db_session.flush()
    stage = Stage(
        organization_id=test_org.id,
        pipeline_id=pipeline.id,
        name="New",
        serial_number=1,
        stage_type=StageType.OPEN,
        created_by=test_org.id,
        updated_by=test_org.id,
    )
    db_session.add(stage)
    await db_session.commit()
    return pipeline.id, stage.id


@pytest_asyncio.fixture
async def other_company_id(db_session: AsyncSession, other_org: Organization) -> str:
    company = Company(
        organization_id=other_org.id,
        name="Globex Secret Co",
        created_by=other_org.id,
        updated_by=other_org.id,
    )
    db_session.add(company)
    await db_session.commit()
    return company.id


@pytest_asyncio.fixture
async def second_member(db_session: AsyncSession, test_org: Organization) -> TeamMember:
    member = TeamMember(
        organization_id=test_org.id,
        name="tm2",
        email="tm2@acme.com",
        password_hash=get_password_hash("MemberPass123"),
        status=RecordStatus.ACTIVE,
    )
    db_session.add(member)
    await db_session.commit()
    return member


def lead_payload(pipeline_id: str, stage_id: str, **overrides) -> dict:
    payload = {
        "name": "Big Deal",
        "pipeline_id": pipeline_id,
        "stage_id": stage_id,
        "amount": "1500.00",
    }
    payload.update(overrides)
    return payload


# ========== Lead Tests ==========

class TestLeadPermissions:
    """Team members need ``lead.*`` permissions; organizations do not."""

    @pytest.mark.asyncio
    async def test_organization_creates_lead(
        self, client: AsyncClient, org_headers: dict, test_org: Organization, pipeline_ids
    ):
        org_id = test_org.id
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=org_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["organization_id"] == org_id
        assert data["created_by"] == org_id
        assert data["created_by_kind"] == "organization"

    @pytest.mark.asyncio
    async def test_assign_then_revoke(
        self, client: AsyncClient, org_headers: dict, member_headers: dict,
        test_org: Organization, test_team_member: TeamMember, pipeline_ids, grant
    ):
        """Granted lead.create -> 201; after the organization revokes it -> 403."""
        org_id, member_id = test_org.id, test_team_member.id
        assignment = await grant(member_id, "lead.create")
        assignment_id = assignment.id

        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=member_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["organization_id"] == org_id
        assert data["created_by"] == member_id
        assert data["created_by_kind"] == "team_member"

        response = await client.delete(f"/api/assign-permission/{assignment_id}", headers=org_headers)
        assert response.status_code == 200

        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=member_headers)
        assert response.status_code == 403
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_read_permission_does_not_allow_create(
        self, client: AsyncClient, member_headers: dict, test_team_member: TeamMember, pipeline_ids, grant
    ):
        await grant(test_team_member.id, "lead.read")

        response = await client.get("/api/lead", headers=member_headers)
        assert response.status_code == 200

        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=member_headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_deactivated_member_is_401_not_403(
        self, client: AsyncClient, org_headers: dict, test_org: Organization,
        second_member: TeamMember, pipeline_ids, grant
    ):
        """A deactivated member fails identity before any permission check."""
        member_id = second_member.id
        await grant(member_id, "lead.create")
        headers = {"Authorization": f"Bearer {create_access_token(subject=member_id, role=ROLE_TEAM_MEMBER)}"}

        response = await client.put(
            "/api/team-member/status",
            json={"team_member_id": member_id, "status": 0},
            headers=org_headers,
        )
        assert response.status_code == 200

        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=headers)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient, pipeline_ids):
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids))
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Unauthorized, token required",
            "data": None,
        }

    @pytest.mark.asyncio
    async def test_super_admin_cannot_write_tenant_data(
        self, client: AsyncClient, admin_headers: dict, pipeline_ids
    ):
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=admin_headers)
        assert response.status_code == 403


class TestLeadScoping:

    @pytest.mark.asyncio
    async def test_other_tenant_gets_404(
        self, client: AsyncClient, org_headers: dict, other_org_headers: dict, pipeline_ids
    ):
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=org_headers)
        lead_id = response.json()["data"]["id"]

        response = await client.get(f"/api/lead/{lead_id}", headers=other_org_headers)
        assert response.status_code == 404
        assert response.json()["data"] is None

        response = await client.put(f"/api/lead/{lead_id}", json={"name": "Stolen"}, headers=other_org_headers)
        assert response.status_code == 404

        response = await client.get("/api/lead", headers=other_org_headers)
        assert response.json()["data"]["totalItems"] == 0

    @pytest.mark.asyncio
    async def test_reference_into_other_tenant_is_404(
        self, client: AsyncClient, org_headers: dict, pipeline_ids, other_company_id: str
    ):
        response = await client.post(
            "/api/lead",
            json=lead_payload(*pipeline_ids, company_id=other_company_id),
            headers=org_headers,
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_other_tenants_pipeline_is_404(
        self, client: AsyncClient, other_org_headers: dict, pipeline_ids
    ):
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=other_org_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_stage_must_belong_to_pipeline(
        self, client: AsyncClient, org_headers: dict, pipeline_ids
    ):
        pipeline_id, _ = pipeline_ids
        response = await client.post("/api/pipeline", json={"name": "Second"}, headers=org_headers)
        second_pipeline_id = response.json()["data"]["id"]
        response = await client.post(
            "/api/stage",
            json={"pipeline_id": second_pipeline_id, "name": "Other", "serial_number": 1},
            headers=org_headers,
        )
        foreign_stage_id = response.json()["data"]["id"]

        response = await client.post(
            "/api/lead", json=lead_payload(pipeline_id, foreign_stage_id), headers=org_headers
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_body_cannot_pick_tenant(
        self, client: AsyncClient, org_headers: dict, test_org: Organization, other_org: Organization,
        pipeline_ids
    ):
        org_id, other_id = test_org.id, other_org.id
        response = await client.post(
            "/api/lead",
            json=lead_payload(*pipeline_ids, organization_id=other_id),
            headers=org_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["organization_id"] == org_id


class TestLeadLifecycle:

    @pytest.mark.asyncio
    async def test_update_stamps_updater(
        self, client: AsyncClient, org_headers: dict, member_headers: dict,
        test_org: Organization, test_team_member: TeamMember, pipeline_ids, grant
    ):
        org_id, member_id = test_org.id, test_team_member.id
        await grant(member_id, "lead.update")
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=org_headers)
        lead_id = response.json()["data"]["id"]

        response = await client.put(f"/api/lead/{lead_id}", json={"name": "Bigger Deal"}, headers=member_headers)
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Bigger Deal"
        assert data["created_by"] == org_id
        assert data["created_by_kind"] == "organization"
        assert data["updated_by"] == member_id
        assert data["updated_by_kind"] == "team_member"

    @pytest.mark.asyncio
    async def test_soft_delete_and_restore(self, client: AsyncClient, org_headers: dict, pipeline_ids):
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=org_headers)
        lead_id = response.json()["data"]["id"]

        response = await client.put(f"/api/lead/{lead_id}/status", json={"status": 0}, headers=org_headers)
        assert response.status_code == 200
        assert response.json()["data"]["status"] == 0

        response = await client.get("/api/lead", headers=org_headers)
        assert response.json()["data"]["totalItems"] == 0
        response = await client.get("/api/lead?status=0", headers=org_headers)
        assert response.json()["data"]["totalItems"] == 1

        response = await client.put(f"/api/lead/{lead_id}/status", json={"status": 1}, headers=org_headers)
        assert response.json()["data"]["status"] == 1

    @pytest.mark.asyncio
    async def test_invalid_status_value(self, client: AsyncClient, org_headers: dict, pipeline_ids):
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=org_headers)
        lead_id = response.json()["data"]["id"]

        response = await client.put(f"/api/lead/{lead_id}/status", json={"status": 7}, headers=org_headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_list_pagination(self, client: AsyncClient, org_headers: dict, pipeline_ids):
        for i in range(3):
            await client.post("/api/lead", json=lead_payload(*pipeline_ids, name=f"Lead {i}"), headers=org_headers)

        response = await client.get("/api/lead?page=2&perPage=2", headers=org_headers)
        data = response.json()["data"]
        assert data["page"] == 2
        assert data["perPage"] == 2
        assert data["totalItems"] == 3
        assert data["totalPages"] == 2
        assert len(data["items"]) == 1


# ========== Other CRM resources ==========

class TestCompaniesAndContacts:

    @pytest.mark.asyncio
    async def test_company_contact_flow(
        self, client: AsyncClient, member_headers: dict, test_team_member: TeamMember, grant
    ):
        member_id = test_team_member.id
        for name in ("company.create", "company.read", "contact.create"):
            await grant(member_id, name)

        response = await client.post(
            "/api/company", json={"name": "Initech", "owner_id": member_id}, headers=member_headers
        )
        assert response.status_code == 201
        company_id = response.json()["data"]["id"]

        response = await client.post(
            "/api/contact",
            json={"name": "Peter", "company_id": company_id, "phone_numbers": ["+15550100"]},
            headers=member_headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["phone_numbers"] == ["+15550100"]

        response = await client.get("/api/company?search=init", headers=member_headers)
        assert response.json()["data"]["totalItems"] == 1

    @pytest.mark.asyncio
    async def test_owner_from_other_tenant(
        self, client: AsyncClient, other_org_headers: dict, test_team_member: TeamMember
    ):
        response = await client.post(
            "/api/company",
            json={"name": "Hooli", "owner_id": test_team_member.id},
            headers=other_org_headers,
        )
        assert response.status_code == 404


class TestStagesAndMeetings:

    @pytest.mark.asyncio
    async def test_stages_listed_in_order(self, client: AsyncClient, org_headers: dict):
        response = await client.post("/api/pipeline", json={"name": "Sales"}, headers=org_headers)
        pipeline_id = response.json()["data"]["id"]
        for serial, name in ((3, "Won"), (1, "New"), (2, "Qualified")):
            await client.post(
                "/api/stage",
                json={"pipeline_id": pipeline_id, "name": name, "serial_number": serial},
                headers=org_headers,
            )

        response = await client.get(f"/api/stage?pipeline_id={pipeline_id}", headers=org_headers)
        assert [s["name"] for s in response.json()["data"]["items"]] == ["New", "Qualified", "Won"]

    @pytest.mark.asyncio
    async def test_meeting_window(self, client: AsyncClient, org_headers: dict):
        starts = datetime.now(timezone.utc) + timedelta(days=1)
        payload = {
            "title": "Demo",
            "starts_at": starts.isoformat(),
            "ends_at": (starts - timedelta(hours=1)).isoformat(),
            "meeting_type": "virtual",
            "location": "https://meet.example/demo",
        }
        response = await client.post("/api/meeting", json=payload, headers=org_headers)
        assert response.status_code == 400

        payload["ends_at"] = (starts + timedelta(hours=1)).isoformat()
        response = await client.post("/api/meeting", json=payload, headers=org_headers)
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["meeting_status"] == "scheduled"
        assert data["created_by_kind"] == "organization"


class TestNotes:

    @pytest.mark.asyncio
    async def test_note_on_lead(self, client: AsyncClient, org_headers: dict, pipeline_ids):
        response = await client.post("/api/lead", json=lead_payload(*pipeline_ids), headers=org_headers)
        lead_id = response.json()["data"]["id"]

        response = await client.post(
            "/api/note",
            json={"title": "Call back", "module": "lead", "module_id": lead_id},
            headers=org_headers,
        )
        assert response.status_code == 201

        response = await client.get(f"/api/note?module=lead&module_id={lead_id}", headers=org_headers)
        assert response.json()["data"]["totalItems"] == 1

    @pytest.mark.asyncio
    async def test_note_on_unknown_module(self, client: AsyncClient, org_headers: dict):
        response = await client.post(
            "/api/note",
            json={"title": "x", "module": "invoice", "module_id": "abc"},
            headers=org_headers,
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_note_on_other_tenants_record(
        self, client: AsyncClient, other_org_headers: dict, pipeline_ids
    ):
        pipeline_id, _ = pipeline_ids
        response = await client.post(
            "/api/note",
            json={"title": "x", "module": "pipeline", "module_id": pipeline_id},
            headers=other_org_headers,
        )
        assert response.status_code == 404
