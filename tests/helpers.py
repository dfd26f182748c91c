"""Test helper functions for common data creation patterns."""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.authz import AccessPolicy, MembershipLookups
from src.scopegate.core.security import create_identity_token
from src.scopegate.models import (
    Engagement,
    EngagementMembership,
    Identity,
    Project,
    ProjectMembership,
    Tenant,
    TenantMembership,
    TenantRole,
)
from tests.factories import (
    EngagementFactory,
    EngagementMembershipFactory,
    IdentityFactory,
    ProjectFactory,
    ProjectMembershipFactory,
    TenantFactory,
    TenantMembershipFactory,
)


async def create_identity(session: AsyncSession, **kwargs) -> Identity:
    identity = IdentityFactory.build(**kwargs)
    session.add(identity)
    await session.flush()
    return identity


async def create_tenant(session: AsyncSession, **kwargs) -> Tenant:
    tenant = TenantFactory.build(**kwargs)
    session.add(tenant)
    await session.flush()
    return tenant


async def add_tenant_member(
    session: AsyncSession,
    identity: Identity,
    tenant: Tenant,
    role: str = TenantRole.MEMBER.value,
    **kwargs,
) -> TenantMembership:
    """Insert a tenant membership row directly (role is not validated)."""
    membership = TenantMembershipFactory.build(
        identity_id=identity.id, tenant_id=tenant.id, role=role, **kwargs
    )
    session.add(membership)
    await session.flush()
    return membership


async def create_project(session: AsyncSession, tenant: Tenant | None, **kwargs) -> Project:
    project = ProjectFactory.build(tenant_id=tenant.id if tenant else None, **kwargs)
    session.add(project)
    await session.flush()
    return project


async def create_engagement(
    session: AsyncSession, tenant: Tenant | None, **kwargs
) -> Engagement:
    engagement = EngagementFactory.build(tenant_id=tenant.id if tenant else None, **kwargs)
    session.add(engagement)
    await session.flush()
    return engagement


async def add_project_member(
    session: AsyncSession, identity: Identity, project: Project, role: str
) -> ProjectMembership:
    """Insert a project membership row directly (role is not validated)."""
    membership = ProjectMembershipFactory.build(
        identity_id=identity.id, project_id=project.id, role=role
    )
    session.add(membership)
    await session.flush()
    return membership


async def add_engagement_member(
    session: AsyncSession, identity: Identity, engagement: Engagement, role: str, **kwargs
) -> EngagementMembership:
    membership = EngagementMembershipFactory.build(
        identity_id=identity.id, engagement_id=engagement.id, role=role, **kwargs
    )
    session.add(membership)
    await session.flush()
    return membership


def policy_for(session: AsyncSession, identity: Identity | UUID | None) -> AccessPolicy:
    """AccessPolicy for an identity, with the default draft statuses."""
    identity_id = identity.id if isinstance(identity, Identity) else identity
    return AccessPolicy(MembershipLookups(session), identity_id, draft_statuses=["draft"])


def auth_headers(identity: Identity) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_identity_token(str(identity.id))}"}
