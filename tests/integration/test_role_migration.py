"""Role reclassification preserves authority and can be restored from backup."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.authz import ScopeRef
from src.scopegate.core.exceptions import InvalidRoleError, NotFoundError
from src.scopegate.models import (
    Identity,
    Project,
    ProjectMembership,
    ProjectRole,
    RoleMigrationBackup,
    ScopeKind,
    Tenant,
    TenantMembership,
    TenantRole,
)
from src.scopegate.services import RoleMigrationService
from src.scopegate.services.role_migration_service import RoleReclassification
from tests.helpers import (
    add_project_member,
    add_tenant_member,
    create_identity,
    create_project,
    policy_for,
)

pytestmark = pytest.mark.integration

TENANT_OWNER_TO_ADMIN = RoleReclassification(
    migration_id="003_reclassify_tenant_owner",
    kind=ScopeKind.TENANT,
    old_role="owner",
    new_role=TenantRole.ADMIN.value,
)
PROJECT_ADMIN_TO_MANAGER = RoleReclassification(
    migration_id="005_reclassify_project_admin",
    kind=ScopeKind.PROJECT,
    old_role="admin",
    new_role=ProjectRole.SUPPLIER_MANAGER.value,
)

# (stored tenant role, stored project role or None)
FIXTURE_MEMBERS = [
    ("owner", None),
    ("admin", None),
    ("member", "admin"),
    ("member", "supplier_manager"),
    ("member", "viewer"),
    ("member", "contributor"),
    ("member", None),
]

# Role sets of the write call sites, before and after the taxonomy change
CALL_SITES = [
    None,
    [ProjectRole.SUPPLIER_MANAGER.value],
    [ProjectRole.SUPPLIER_MANAGER.value, ProjectRole.SUPPLIER_FINANCE.value],
    [ProjectRole.CONTRIBUTOR.value],
]


@pytest.fixture
def service(db_session: AsyncSession) -> RoleMigrationService:
    return RoleMigrationService.from_session(db_session)


@pytest.fixture
async def legacy_members(
    db_session: AsyncSession, tenant: Tenant
) -> tuple[list[Identity], list[Project]]:
    """Members still holding pre-migration role values."""
    projects = [await create_project(db_session, tenant) for _ in range(2)]
    identities = []
    for tenant_role, project_role in FIXTURE_MEMBERS:
        identity = await create_identity(db_session)
        await add_tenant_member(db_session, identity, tenant, tenant_role)
        if project_role is not None:
            for project in projects:
                await add_project_member(db_session, identity, project, project_role)
        identities.append(identity)
    await db_session.commit()
    return identities, projects


async def write_outcomes(session: AsyncSession, identities, projects, tenant_id) -> dict:
    outcomes = {}
    for identity in identities:
        policy = policy_for(session, identity.id)
        tenant_scope = ScopeRef(ScopeKind.TENANT, tenant_id)
        outcomes[(identity.id, "tenant")] = await policy.can_write(tenant_scope)
        for project in projects:
            scope = ScopeRef(ScopeKind.PROJECT, project.id)
            for index, roles in enumerate(CALL_SITES):
                outcomes[(identity.id, project.id, index)] = await policy.can_write(scope, roles)
            outcomes[(identity.id, project.id, "access")] = await policy.can_access(scope)
    return outcomes


class TestReclassify:
    async def test_preserves_every_write_decision(
        self, db_session: AsyncSession, service: RoleMigrationService, tenant, legacy_members
    ):
        identities, projects = legacy_members
        before = await write_outcomes(db_session, identities, projects, tenant.id)
        tenant_snapshot = await service.snapshot(ScopeKind.TENANT)
        project_snapshot = await service.snapshot(ScopeKind.PROJECT)

        await service.reclassify(TENANT_OWNER_TO_ADMIN)
        await service.reclassify(PROJECT_ADMIN_TO_MANAGER)

        assert await write_outcomes(db_session, identities, projects, tenant.id) == before
        assert await service.snapshot(ScopeKind.TENANT) == tenant_snapshot
        assert await service.snapshot(ScopeKind.PROJECT) == project_snapshot

    async def test_rewrites_rows_and_keeps_backups(
        self, db_session: AsyncSession, service: RoleMigrationService, legacy_members
    ):
        result = await service.reclassify(PROJECT_ADMIN_TO_MANAGER)

        assert result.count == 2
        assert result.dry_run is False
        stored = (await db_session.execute(select(ProjectMembership.role))).scalars().all()
        assert "admin" not in stored

        backups = (
            await db_session.execute(
                select(RoleMigrationBackup).where(
                    RoleMigrationBackup.migration_id == PROJECT_ADMIN_TO_MANAGER.migration_id
                )
            )
        ).scalars().all()
        assert len(backups) == 2
        assert {b.old_role for b in backups} == {"admin"}
        assert {b.new_role for b in backups} == {"supplier_manager"}
        assert {b.scope_kind for b in backups} == {"project"}

    async def test_dry_run_counts_without_writing(
        self, db_session: AsyncSession, service: RoleMigrationService, legacy_members
    ):
        result = await service.reclassify(TENANT_OWNER_TO_ADMIN, dry_run=True)

        assert result.count == 1
        assert result.dry_run is True
        stored = (await db_session.execute(select(TenantMembership.role))).scalars().all()
        assert "owner" in stored
        backups = (await db_session.execute(select(RoleMigrationBackup))).scalars().all()
        assert backups == []

    async def test_nothing_to_reclassify(self, service: RoleMigrationService, tenant_member):
        result = await service.reclassify(PROJECT_ADMIN_TO_MANAGER)
        assert result.count == 0

    async def test_target_must_be_a_current_role(self, service: RoleMigrationService):
        change = RoleReclassification("bad", ScopeKind.TENANT, "admin", "owner")
        with pytest.raises(InvalidRoleError):
            await service.reclassify(change)


class TestRestore:
    async def test_restores_original_values(
        self, db_session: AsyncSession, service: RoleMigrationService, legacy_members
    ):
        await service.reclassify(TENANT_OWNER_TO_ADMIN)

        restored = await service.restore(TENANT_OWNER_TO_ADMIN.migration_id)

        assert restored == 1
        stored = (await db_session.execute(select(TenantMembership.role))).scalars().all()
        assert stored.count("owner") == 1
        remaining = (await db_session.execute(select(RoleMigrationBackup))).scalars().all()
        assert remaining == []

    async def test_leaves_roles_changed_since_alone(
        self, db_session: AsyncSession, service: RoleMigrationService, legacy_members
    ):
        identities, projects = legacy_members
        legacy_admin = identities[2]
        await service.reclassify(PROJECT_ADMIN_TO_MANAGER)

        membership = await db_session.get(ProjectMembership, (legacy_admin.id, projects[0].id))
        membership.role = ProjectRole.VIEWER.value
        await db_session.commit()

        restored = await service.restore(PROJECT_ADMIN_TO_MANAGER.migration_id)

        assert restored == 1
        await db_session.refresh(membership)
        assert membership.role == ProjectRole.VIEWER.value
        untouched = await db_session.get(ProjectMembership, (legacy_admin.id, projects[1].id))
        await db_session.refresh(untouched)
        assert untouched.role == "admin"

    async def test_unknown_migration(self, service: RoleMigrationService):
        with pytest.raises(NotFoundError):
            await service.restore("never_ran")
