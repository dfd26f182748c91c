"""Repository for Tenant entity."""

from uuid import UUID

from sqlmodel import select

from src.scopegate.models import Tenant
from src.scopegate.repositories.base import BaseRepository


class TenantRepository(BaseRepository[Tenant]):
    """Repository for Tenant entity."""

    model = Tenant

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Get tenant by slug."""
        result = await self.session.execute(select(Tenant).where(Tenant.slug == slug))
        return result.scalar_one_or_none()

    async def exists_by_slug(self, slug: str) -> bool:
        """Check if a tenant with the given slug exists."""
        tenant = await self.get_by_slug(slug)
        return tenant is not None

    async def get_live(self, tenant_id: UUID) -> Tenant | None:
        """Get tenant unless it is soft-deleted."""
        result = await self.session.execute(
            select(Tenant).where(
                Tenant.id == tenant_id,
                Tenant.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return result.scalar_one_or_none()
