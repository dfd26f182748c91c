"""Tenant and scope lifecycle service."""

from typing import Any
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.core.exceptions import NotFoundError, RejectedWriteError
from src.scopegate.core.logging import get_logger
from src.scopegate.core.security import validate_tenant_slug_format
from src.scopegate.models import Engagement, Project, Tenant, TenantMembership, TenantRole
from src.scopegate.models.base import utc_now
from src.scopegate.repositories import (
    AccessTokenRepository,
    EngagementMembershipRepository,
    EngagementRepository,
    ProjectMembershipRepository,
    ProjectRepository,
    TenantMembershipRepository,
    TenantRepository,
)

logger = get_logger(__name__)


class TenantService:
    """Create tenants and their scopes; delete them as a unit."""

    def __init__(
        self,
        tenant_repo: TenantRepository,
        project_repo: ProjectRepository,
        engagement_repo: EngagementRepository,
        tenant_member_repo: TenantMembershipRepository,
        project_member_repo: ProjectMembershipRepository,
        engagement_member_repo: EngagementMembershipRepository,
        token_repo: AccessTokenRepository,
        session: AsyncSession,
    ):
        self.tenant_repo = tenant_repo
        self.project_repo = project_repo
        self.engagement_repo = engagement_repo
        self.tenant_member_repo = tenant_member_repo
        self.project_member_repo = project_member_repo
        self.engagement_member_repo = engagement_member_repo
        self.token_repo = token_repo
        self.session = session

    @classmethod
    def from_session(cls, session: AsyncSession) -> "TenantService":
        return cls(
            TenantRepository(session),
            ProjectRepository(session),
            EngagementRepository(session),
            TenantMembershipRepository(session),
            ProjectMembershipRepository(session),
            EngagementMembershipRepository(session),
            AccessTokenRepository(session),
            session,
        )

    async def bootstrap_tenant(
        self,
        name: str,
        slug: str,
        admin_identity_id: UUID,
        features: dict[str, Any] | None = None,
    ) -> Tenant:
        """Create a tenant together with its first tenant-admin.

        Privileged: callers must be super-admins (checked at the route).

        Raises:
            ValueError: If slug format is invalid
            RejectedWriteError: If slug already exists
        """
        validate_tenant_slug_format(slug)
        if await self.tenant_repo.exists_by_slug(slug):
            raise RejectedWriteError(f"Tenant with slug '{slug}' already exists")

        try:
            tenant = Tenant(name=name, slug=slug, features=features or {})
            self.tenant_repo.add(tenant)
            await self.session.flush()
            self.tenant_member_repo.add(
                TenantMembership(
                    identity_id=admin_identity_id,
                    tenant_id=tenant.id,
                    role=TenantRole.ADMIN.value,
                )
            )
            await self.session.commit()
            await self.session.refresh(tenant)
        except IntegrityError as e:
            await self.session.rollback()
            raise RejectedWriteError(f"Tenant with slug '{slug}' already exists") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Tenant bootstrapped",
            tenant_id=str(tenant.id),
            slug=slug,
            admin_identity_id=str(admin_identity_id),
        )
        return tenant

    async def _require_live_tenant(self, tenant_id: UUID) -> Tenant:
        tenant = await self.tenant_repo.get_live(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        return tenant

    async def create_project(self, tenant_id: UUID, name: str) -> Project:
        await self._require_live_tenant(tenant_id)
        try:
            project = Project(tenant_id=tenant_id, name=name)
            self.project_repo.add(project)
            await self.session.commit()
            await self.session.refresh(project)
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Project created", tenant_id=str(tenant_id), project_id=str(project.id))
        return project

    async def create_engagement(self, tenant_id: UUID, name: str) -> Engagement:
        await self._require_live_tenant(tenant_id)
        try:
            engagement = Engagement(tenant_id=tenant_id, name=name)
            self.engagement_repo.add(engagement)
            await self.session.commit()
            await self.session.refresh(engagement)
        except Exception:
            await self.session.rollback()
            raise
        logger.info(
            "Engagement created", tenant_id=str(tenant_id), engagement_id=str(engagement.id)
        )
        return engagement

    async def soft_delete_tenant(self, tenant_id: UUID) -> Tenant:
        """Mark tenant deleted. Every scope under it stops being accessible."""
        try:
            tenant = await self._require_live_tenant(tenant_id)
            tenant.deleted_at = utc_now()
            tenant.is_active = False
            await self.session.commit()
            await self.session.refresh(tenant)
        except Exception:
            await self.session.rollback()
            raise
        logger.info("Tenant soft-deleted", tenant_id=str(tenant_id))
        return tenant

    async def delete_tenant_cascade(self, tenant_id: UUID) -> dict[str, int]:
        """Remove a tenant and everything it owns in one transaction.

        Order: access tokens, leaf memberships, leaf scopes, tenant memberships,
        tenant. Any failure rolls back the whole deletion.

        Returns:
            Rows deleted per table
        """
        try:
            tenant = await self.tenant_repo.get_by_id(tenant_id)
            if tenant is None:
                raise NotFoundError("Tenant not found")

            project_ids = await self.project_repo.list_ids_by_tenant(tenant_id)
            engagement_ids = await self.engagement_repo.list_ids_by_tenant(tenant_id)

            counts = {
                "access_tokens": await self.token_repo.delete_by_engagements(engagement_ids),
                "engagement_memberships": (
                    await self.engagement_member_repo.delete_by_engagements(engagement_ids)
                ),
                "project_memberships": (
                    await self.project_member_repo.delete_by_projects(project_ids)
                ),
                "engagements": await self.engagement_repo.delete_by_tenant(tenant_id),
                "projects": await self.project_repo.delete_by_tenant(tenant_id),
                "tenant_memberships": await self.tenant_member_repo.delete_by_tenant(tenant_id),
            }
            await self.tenant_repo.delete(tenant)
            counts["tenants"] = 1
            await self.session.commit()
        except Exception as e:
            await self.session.rollback()
            logger.error("Tenant cascade delete failed", tenant_id=str(tenant_id), error=str(e))
            raise

        logger.info("Tenant deleted", tenant_id=str(tenant_id), **counts)
        return counts
