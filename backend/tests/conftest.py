"""
Test configuration and fixtures for PipelineCRM backend tests.
"""
import os

# Settings are read once at import; point them at the test database first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("PAYMENT_KEY_SECRET", "test_payment_secret")
os.environ.setdefault("EMAIL_LOG_PATH", "./test_emails.log")

import pytest_asyncio
from typing import AsyncGenerator, Awaitable, Callable
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from app.main import app
from app.db.base import Base, get_db
from app.core.security import (
    ROLE_ORGANIZATION, ROLE_SUPERADMIN, ROLE_TEAM_MEMBER, create_access_token, get_password_hash,
)
from app.models.base import RecordStatus
from app.models.organization import Organization
from app.models.permission import Permission, TeamMemberPermission
from app.models.super_admin import SuperAdmin
from app.models.team_member import TeamMember, TeamMemberRole


# Use a file-based SQLite DB to avoid :memory: multiple-connection issues
# with SQLAlchemy + aiosqlite (each new connection would see an empty DB).
TEST_DATABASE_URL = "sqlite+aiosqlite:///./test.db"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=NullPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()
    # Clean up test database file
    try:
        os.remove("./test.db")
    except OSError:
        pass


@pytest_asyncio.fixture(scope="function")
async def session_maker(db_engine):
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Session used by fixtures and assertions. Fixtures commit their rows."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """Test client whose requests each get their own session, like production."""
    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def bearer(subject: str, role: str = None) -> dict:
    token = create_access_token(subject=subject, role=role)
    return {"Authorization": f"Bearer {token}"}


# ========== Principals ==========

@pytest_asyncio.fixture
async def test_org(db_session: AsyncSession) -> Organization:
    """Create a test organization."""
    org = Organization(
        name="Acme Sales",
        email="owner@acme.com",
        password_hash=get_password_hash("OrgPass123"),
        pin_code="560001",
        status=RecordStatus.ACTIVE,
    )
    db_session.add(org)
    await db_session.commit()
    return org


@pytest_asyncio.fixture
async def other_org(db_session: AsyncSession) -> Organization:
    """A second tenant, used for isolation checks."""
    org = Organization(
        name="Globex",
        email="owner@globex.com",
        password_hash=get_password_hash("OrgPass123"),
        status=RecordStatus.ACTIVE,
    )
    db_session.add(org)
    await db_session.commit()
    return org


@pytest_asyncio.fixture
async def test_team_member(db_session: AsyncSession, test_org: Organization) -> TeamMember:
    """Create an active sales team member of ``test_org`` with no permissions."""
    member = TeamMember(
        organization_id=test_org.id,
        name="tm1",
        full_name="Team Member One",
        email="tm1@acme.com",
        password_hash=get_password_hash("MemberPass123"),
        role=TeamMemberRole.SALES,
        status=RecordStatus.ACTIVE,
    )
    db_session.add(member)
    await db_session.commit()
    return member


@pytest_asyncio.fixture
async def test_super_admin(db_session: AsyncSession) -> SuperAdmin:
    admin = SuperAdmin(
        name="Root",
        email="root@pipelinecrm.com",
        password_hash=get_password_hash("AdminPass123"),
        status=RecordStatus.ACTIVE,
    )
    db_session.add(admin)
    await db_session.commit()
    return admin


@pytest_asyncio.fixture
async def org_headers(test_org: Organization) -> dict:
    return bearer(test_org.id, ROLE_ORGANIZATION)


@pytest_asyncio.fixture
async def other_org_headers(other_org: Organization) -> dict:
    return bearer(other_org.id, ROLE_ORGANIZATION)


@pytest_asyncio.fixture
async def member_headers(test_team_member: TeamMember) -> dict:
    return bearer(test_team_member.id, ROLE_TEAM_MEMBER)


@pytest_asyncio.fixture
async def admin_headers(test_super_admin: SuperAdmin) -> dict:
    return bearer(test_super_admin.id, ROLE_SUPERADMIN)


# ========== Permissions ==========

@pytest_asyncio.fixture
async def grant(db_session: AsyncSession) -> Callable[[str, str], Awaitable[TeamMemberPermission]]:
    """Assign ``permission_name`` to a team member, defining the permission if needed."""
    permissions: dict[str, Permission] = {}

    async def _grant(team_member_id: str, permission_name: str) -> TeamMemberPermission:
        permission = permissions.get(permission_name)
        if permission is None:
            permission = Permission(name=permission_name, description="")
            db_session.add(permission)
            await db_session.flush()
            permissions[permission_name] = permission

        assignment = TeamMemberPermission(team_member_id=team_member_id, permission_id=permission.id)
        db_session.add(assignment)
        await db_session.commit()
        return assignment

    return _grant
