"""Integration test fixtures for database and HTTP client operations.

Tables are created from model metadata on an in-memory SQLite database per
test. Uses polyfactory for type-safe test data generation.
"""

from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import src.scopegate.models  # noqa: F401 - registers tables on the metadata
from src.scopegate.api.dependencies.db import get_db_session
from src.scopegate.core.db import get_session
from src.scopegate.main import create_app
from src.scopegate.models import Engagement, Identity, Project, Tenant, TenantRole
from tests.helpers import (
    add_tenant_member,
    create_engagement,
    create_identity,
    create_project,
    create_tenant,
)


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with every table created."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Provide an async session for database operations.

    Tests must call `await session.commit()` to make setup rows visible to
    other sessions (services and API requests use their own).
    """
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture
async def tenant(db_session: AsyncSession) -> Tenant:
    tenant = await create_tenant(db_session)
    await db_session.commit()
    return tenant


@pytest.fixture
async def tenant_admin(db_session: AsyncSession, tenant: Tenant) -> Identity:
    identity = await create_identity(db_session)
    await add_tenant_member(db_session, identity, tenant, TenantRole.ADMIN.value)
    await db_session.commit()
    return identity


@pytest.fixture
async def tenant_member(db_session: AsyncSession, tenant: Tenant) -> Identity:
    identity = await create_identity(db_session)
    await add_tenant_member(db_session, identity, tenant, TenantRole.MEMBER.value)
    await db_session.commit()
    return identity


@pytest.fixture
async def outsider(db_session: AsyncSession) -> Identity:
    """Identity with no memberships anywhere."""
    identity = await create_identity(db_session)
    await db_session.commit()
    return identity


@pytest.fixture
async def superuser(db_session: AsyncSession) -> Identity:
    identity = await create_identity(db_session, is_superuser=True)
    await db_session.commit()
    return identity


@pytest.fixture
async def project(db_session: AsyncSession, tenant: Tenant) -> Project:
    project = await create_project(db_session, tenant)
    await db_session.commit()
    return project


@pytest.fixture
async def engagement(db_session: AsyncSession, tenant: Tenant) -> Engagement:
    engagement = await create_engagement(db_session, tenant)
    await db_session.commit()
    return engagement


@pytest.fixture
async def client(
    engine: AsyncEngine, monkeypatch: pytest.MonkeyPatch
) -> AsyncGenerator[AsyncClient]:
    """HTTP client against the app, bound to the test database."""

    async def _test_db_session() -> AsyncGenerator[AsyncSession]:
        async with get_session(engine) as session:
            yield session

    async def _temporal_unavailable() -> None:
        raise ConnectionError("Temporal not available in tests")

    monkeypatch.setattr("src.scopegate.main.get_temporal_client", _temporal_unavailable)
    monkeypatch.setattr("src.scopegate.main.get_session", lambda: get_session(engine))
    monkeypatch.setattr("src.scopegate.main._health_cache", None)

    app = create_app()
    app.dependency_overrides[get_db_session] = _test_db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
