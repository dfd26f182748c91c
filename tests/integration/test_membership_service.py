"""Membership writes: taxonomy enforcement, conflicts, soft removal."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.authz import ScopeRef
from src.scopegate.core.exceptions import (
    InvalidRoleError,
    MembershipConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from src.scopegate.models import (
    EngagementMembership,
    Identity,
    ProjectMembership,
    ProjectRole,
    ScopeKind,
    Tenant,
    TenantMembership,
    TenantRole,
)
from src.scopegate.models.base import utc_now
from src.scopegate.services import MembershipService
from tests.helpers import add_engagement_member, create_engagement, create_identity, policy_for

pytestmark = pytest.mark.integration


@pytest.fixture
def service(db_session: AsyncSession) -> MembershipService:
    return MembershipService.from_session(db_session)


class TestGrant:
    async def test_grant_project_membership(
        self, db_session: AsyncSession, service: MembershipService, tenant_member, project
    ):
        scope = ScopeRef(ScopeKind.PROJECT, project.id)
        membership = await service.grant(scope, tenant_member.id, ProjectRole.VIEWER.value)

        assert isinstance(membership, ProjectMembership)
        assert membership.role == "viewer"
        assert await policy_for(db_session, tenant_member).can_access(scope) is True

    async def test_grant_tenant_membership_returns_tenant_row(
        self, service: MembershipService, outsider, tenant
    ):
        membership = await service.grant_tenant_membership(outsider.id, tenant.id)

        assert isinstance(membership, TenantMembership)
        assert membership.tenant_id == tenant.id
        assert membership.role == TenantRole.MEMBER.value
        assert membership.is_active is True

    async def test_retired_role_is_rejected(self, service: MembershipService, outsider, tenant):
        with pytest.raises(InvalidRoleError, match="retired"):
            await service.grant(ScopeRef(ScopeKind.TENANT, tenant.id), outsider.id, "owner")

    async def test_role_of_wrong_kind_is_rejected(
        self, service: MembershipService, tenant_member, engagement
    ):
        with pytest.raises(InvalidRoleError):
            await service.grant(
                ScopeRef(ScopeKind.ENGAGEMENT, engagement.id),
                tenant_member.id,
                ProjectRole.SUPPLIER_MANAGER.value,
            )

    async def test_duplicate_grant_is_a_conflict_not_a_denial(
        self, service: MembershipService, tenant_member, project
    ):
        scope = ScopeRef(ScopeKind.PROJECT, project.id)
        identity_id = tenant_member.id
        await service.grant(scope, identity_id, ProjectRole.VIEWER.value)

        with pytest.raises(MembershipConflictError, match="already a member"):
            await service.grant(scope, identity_id, ProjectRole.CONTRIBUTOR.value)

    async def test_unknown_scope(self, service: MembershipService, outsider):
        with pytest.raises(NotFoundError):
            await service.grant(ScopeRef(ScopeKind.PROJECT, outsider.id), outsider.id, "viewer")

    async def test_soft_deleted_scope(
        self, db_session: AsyncSession, service: MembershipService, tenant_member, project
    ):
        project.deleted_at = utc_now()
        await db_session.commit()
        scope = ScopeRef(ScopeKind.PROJECT, project.id)
        identity_id = tenant_member.id

        with pytest.raises(NotFoundError):
            await service.grant(scope, identity_id, "viewer")


class TestChangeAndAssign:
    async def test_change_role_last_writer_wins(
        self, service: MembershipService, tenant_member, project
    ):
        scope = ScopeRef(ScopeKind.PROJECT, project.id)
        await service.grant(scope, tenant_member.id, "viewer")
        await service.change_role(scope, tenant_member.id, "contributor")
        membership = await service.change_role(scope, tenant_member.id, "supplier_finance")

        assert membership.role == "supplier_finance"

    async def test_change_role_requires_membership(self, service: MembershipService, outsider):
        identity_id = outsider.id
        with pytest.raises(NotFoundError):
            await service.change_role(
                ScopeRef(ScopeKind.PROJECT, identity_id), identity_id, "viewer"
            )

    async def test_assign_grants_then_updates(
        self, db_session: AsyncSession, service: MembershipService, tenant_member, engagement
    ):
        scope = ScopeRef(ScopeKind.ENGAGEMENT, engagement.id)
        await service.assign(scope, tenant_member.id, "participant")
        await service.assign(scope, tenant_member.id, "evaluator")

        rows = (
            await db_session.execute(
                select(EngagementMembership).where(
                    EngagementMembership.engagement_id == engagement.id
                )
            )
        ).scalars().all()
        assert [row.role for row in rows] == ["evaluator"]


class TestRevoke:
    async def test_tenant_membership_is_deactivated_not_deleted(
        self, db_session: AsyncSession, service: MembershipService, tenant: Tenant, tenant_member
    ):
        tenant_id = tenant.id
        identity_id = tenant_member.id
        await service.revoke(ScopeRef(ScopeKind.TENANT, tenant_id), identity_id)

        row = await db_session.get(TenantMembership, (identity_id, tenant_id))
        assert row is not None
        assert row.is_active is False

    async def test_regrant_after_deactivation_requires_reactivation(
        self, db_session: AsyncSession, service: MembershipService, tenant: Tenant, tenant_member
    ):
        tenant_id = tenant.id
        identity_id = tenant_member.id
        scope = ScopeRef(ScopeKind.TENANT, tenant_id)
        await service.revoke(scope, identity_id)

        with pytest.raises(MembershipConflictError, match="reactivate"):
            await service.grant(scope, identity_id, TenantRole.MEMBER.value)

        membership = await service.reactivate_tenant_membership(
            identity_id, tenant_id, TenantRole.ADMIN.value
        )
        assert membership.is_active is True
        assert await policy_for(db_session, identity_id).is_tenant_admin(tenant_id) is True

    async def test_reactivating_active_membership_is_a_conflict(
        self, service: MembershipService, tenant: Tenant, tenant_member
    ):
        tenant_id = tenant.id
        identity_id = tenant_member.id
        with pytest.raises(MembershipConflictError, match="already active"):
            await service.reactivate_tenant_membership(identity_id, tenant_id)

    async def test_leaf_membership_is_deleted(
        self, db_session: AsyncSession, service: MembershipService, tenant_member, project
    ):
        scope = ScopeRef(ScopeKind.PROJECT, project.id)
        await service.grant(scope, tenant_member.id, "viewer")
        await service.revoke(scope, tenant_member.id)

        assert await db_session.get(ProjectMembership, (tenant_member.id, project.id)) is None

    async def test_revoking_missing_membership(self, service: MembershipService, outsider, tenant):
        tenant_id = tenant.id
        identity_id = outsider.id
        with pytest.raises(NotFoundError):
            await service.revoke(ScopeRef(ScopeKind.TENANT, tenant_id), identity_id)


class TestDefaultEngagement:
    async def test_only_one_default(
        self, db_session: AsyncSession, service: MembershipService, tenant, tenant_member
    ):
        first = await create_engagement(db_session, tenant)
        second = await create_engagement(db_session, tenant)
        await add_engagement_member(db_session, tenant_member, first, "participant")
        await add_engagement_member(db_session, tenant_member, second, "participant")
        await db_session.commit()

        await service.set_default_engagement(tenant_member.id, first.id)
        await service.set_default_engagement(tenant_member.id, second.id)

        rows = (
            await db_session.execute(
                select(EngagementMembership.engagement_id).where(
                    EngagementMembership.identity_id == tenant_member.id,
                    EngagementMembership.is_default == True,  # noqa: E712
                )
            )
        ).scalars().all()
        assert rows == [second.id]

    async def test_requires_membership(self, service: MembershipService, outsider, engagement):
        identity_id = outsider.id
        engagement_id = engagement.id
        with pytest.raises(NotFoundError):
            await service.set_default_engagement(identity_id, engagement_id)


class TestListMembers:
    async def test_lists_for_accessible_scope(
        self,
        db_session: AsyncSession,
        service: MembershipService,
        tenant: Tenant,
        tenant_admin: Identity,
        tenant_member: Identity,
    ):
        items, next_cursor, has_more = await service.list_members(
            policy_for(db_session, tenant_admin), ScopeRef(ScopeKind.TENANT, tenant.id), None, 10
        )
        assert {m.identity_id for m in items} == {tenant_admin.id, tenant_member.id}
        assert next_cursor is None
        assert has_more is False

    async def test_paginates(
        self, db_session: AsyncSession, service: MembershipService, tenant_admin, engagement
    ):
        for _ in range(3):
            identity = await create_identity(db_session)
            await add_engagement_member(db_session, identity, engagement, "participant")
        await db_session.commit()

        policy = policy_for(db_session, tenant_admin)
        scope = ScopeRef(ScopeKind.ENGAGEMENT, engagement.id)
        first_page, cursor, has_more = await service.list_members(policy, scope, None, 2)
        assert len(first_page) == 2
        assert has_more is True
        second_page, _, has_more = await service.list_members(policy, scope, cursor, 2)
        assert has_more is False
        assert len(second_page) == 1

    async def test_denied_for_outsider(
        self, db_session: AsyncSession, service: MembershipService, outsider, tenant
    ):
        with pytest.raises(PermissionDeniedError):
            await service.list_members(
                policy_for(db_session, outsider), ScopeRef(ScopeKind.TENANT, tenant.id), None, 10
            )
