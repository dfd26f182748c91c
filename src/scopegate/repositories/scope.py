"""Repositories for leaf scopes (projects and engagements)."""

from typing import TypeVar
from uuid import UUID

from sqlalchemy import delete
from sqlmodel import SQLModel, select

from src.scopegate.models import Engagement, Project
from src.scopegate.repositories.base import BaseRepository


ScopeType = TypeVar("ScopeType", bound=SQLModel)


class _LeafScopeRepository(BaseRepository[ScopeType]):
    async def get_live(self, scope_id: UUID) -> ScopeType | None:
        """Get scope unless it is soft-deleted."""
        result = await self.session.execute(
            select(self.model).where(
                self.model.id == scope_id,  # type: ignore[attr-defined]
                self.model.deleted_at.is_(None),  # type: ignore[attr-defined]
            )
        )
        return result.scalar_one_or_none()

    async def list_ids_by_tenant(self, tenant_id: UUID) -> list[UUID]:
        """IDs of every scope owned by a tenant, deleted or not."""
        result = await self.session.execute(
            select(self.model.id).where(
                self.model.tenant_id == tenant_id  # type: ignore[attr-defined]
            )
        )
        return list(result.scalars().all())

    async def delete_by_tenant(self, tenant_id: UUID) -> int:
        result = await self.session.execute(
            delete(self.model).where(
                self.model.tenant_id == tenant_id  # type: ignore[attr-defined]
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]


class ProjectRepository(_LeafScopeRepository[Project]):
    model = Project


class EngagementRepository(_LeafScopeRepository[Engagement]):
    model = Engagement
