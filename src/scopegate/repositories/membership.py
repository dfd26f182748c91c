"""Repositories for tenant, project and engagement memberships.

Write-side access only. Access decisions read memberships through
MembershipLookups, never through these repositories.
"""

from uuid import UUID

from sqlalchemy import delete
from sqlmodel import select, update

from src.scopegate.models import (
    EngagementMembership,
    ProjectMembership,
    TenantMembership,
)
from src.scopegate.repositories.base import BaseRepository


class TenantMembershipRepository(BaseRepository[TenantMembership]):
    """Repository for identity-tenant memberships."""

    model = TenantMembership

    async def get_membership(
        self, identity_id: UUID, tenant_id: UUID
    ) -> TenantMembership | None:
        """Get membership row for the pair, active or not."""
        result = await self.session.execute(
            select(TenantMembership).where(
                TenantMembership.identity_id == identity_id,
                TenantMembership.tenant_id == tenant_id,
            )
        )
        return result.scalar_one_or_none()

    async def get_active_membership(
        self, identity_id: UUID, tenant_id: UUID
    ) -> TenantMembership | None:
        result = await self.session.execute(
            select(TenantMembership).where(
                TenantMembership.identity_id == identity_id,
                TenantMembership.tenant_id == tenant_id,
                TenantMembership.is_active == True,  # noqa: E712
            )
        )
        return result.scalar_one_or_none()

    def create_membership(self, identity_id: UUID, tenant_id: UUID, role: str) -> TenantMembership:
        """Create a new membership (add to session, no commit)."""
        membership = TenantMembership(identity_id=identity_id, tenant_id=tenant_id, role=role)
        self.session.add(membership)
        return membership

    async def list_for_tenant_paginated(
        self, tenant_id: UUID, cursor: str | None, limit: int
    ) -> tuple[list[TenantMembership], str | None, bool]:
        query = select(TenantMembership).where(
            TenantMembership.tenant_id == tenant_id,
            TenantMembership.is_active == True,  # noqa: E712
        )
        return await self.paginate(query, cursor, limit, TenantMembership.created_at)

    async def delete_by_tenant(self, tenant_id: UUID) -> int:
        result = await self.session.execute(
            delete(TenantMembership).where(
                TenantMembership.tenant_id == tenant_id  # type: ignore[arg-type]
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]


class ProjectMembershipRepository(BaseRepository[ProjectMembership]):
    """Repository for identity-project memberships."""

    model = ProjectMembership

    async def get_membership(
        self, identity_id: UUID, project_id: UUID
    ) -> ProjectMembership | None:
        result = await self.session.execute(
            select(ProjectMembership).where(
                ProjectMembership.identity_id == identity_id,
                ProjectMembership.project_id == project_id,
            )
        )
        return result.scalar_one_or_none()

    def create_membership(
        self, identity_id: UUID, project_id: UUID, role: str
    ) -> ProjectMembership:
        membership = ProjectMembership(identity_id=identity_id, project_id=project_id, role=role)
        self.session.add(membership)
        return membership

    async def list_for_project_paginated(
        self, project_id: UUID, cursor: str | None, limit: int
    ) -> tuple[list[ProjectMembership], str | None, bool]:
        query = select(ProjectMembership).where(ProjectMembership.project_id == project_id)
        return await self.paginate(query, cursor, limit, ProjectMembership.created_at)

    async def delete_by_projects(self, project_ids: list[UUID]) -> int:
        if not project_ids:
            return 0
        result = await self.session.execute(
            delete(ProjectMembership).where(
                ProjectMembership.project_id.in_(project_ids)  # type: ignore[attr-defined]
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]


class EngagementMembershipRepository(BaseRepository[EngagementMembership]):
    """Repository for identity-engagement memberships."""

    model = EngagementMembership

    async def get_membership(
        self, identity_id: UUID, engagement_id: UUID
    ) -> EngagementMembership | None:
        result = await self.session.execute(
            select(EngagementMembership).where(
                EngagementMembership.identity_id == identity_id,
                EngagementMembership.engagement_id == engagement_id,
            )
        )
        return result.scalar_one_or_none()

    def create_membership(
        self, identity_id: UUID, engagement_id: UUID, role: str
    ) -> EngagementMembership:
        membership = EngagementMembership(
            identity_id=identity_id, engagement_id=engagement_id, role=role
        )
        self.session.add(membership)
        return membership

    async def list_for_engagement_paginated(
        self, engagement_id: UUID, cursor: str | None, limit: int
    ) -> tuple[list[EngagementMembership], str | None, bool]:
        query = select(EngagementMembership).where(
            EngagementMembership.engagement_id == engagement_id
        )
        return await self.paginate(query, cursor, limit, EngagementMembership.created_at)

    async def clear_defaults(self, identity_id: UUID) -> None:
        """Unset is_default on every engagement membership of an identity."""
        await self.session.execute(
            update(EngagementMembership)
            .where(EngagementMembership.identity_id == identity_id)  # type: ignore[arg-type]
            .where(EngagementMembership.is_default == True)  # type: ignore[arg-type]  # noqa: E712
            .values(is_default=False)
        )

    async def delete_by_engagements(self, engagement_ids: list[UUID]) -> int:
        if not engagement_ids:
            return 0
        result = await self.session.execute(
            delete(EngagementMembership).where(
                EngagementMembership.engagement_id.in_(engagement_ids)  # type: ignore[attr-defined]
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
