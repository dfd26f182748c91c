"""Elevated membership lookups.

The only code path that reads the membership tables directly. Each method is
a narrow, parameterized Core select that runs inside the caller's session, so
a predicate can consult the table it protects without re-entering the policy
that guards that table. Every method is total: missing rows yield False,
None or an empty set.

Only active tenant memberships on tenants that are not soft-deleted count.
Stored role values are read through the role taxonomy, so rows still holding
a retired value resolve to its replacement.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.authz.scopes import ScopeRef
from src.scopegate.authz.taxonomy import RoleType, effective_role, get_taxonomy
from src.scopegate.models import (
    Engagement,
    EngagementMembership,
    Identity,
    Project,
    ProjectMembership,
    ScopeKind,
    Tenant,
    TenantMembership,
    TenantRole,
)

# kind -> (scope table, membership table, membership scope column)
_LEAF_TABLES: dict[ScopeKind, tuple[Any, Any, Any]] = {
    ScopeKind.PROJECT: (Project, ProjectMembership, ProjectMembership.project_id),
    ScopeKind.ENGAGEMENT: (Engagement, EngagementMembership, EngagementMembership.engagement_id),
}


def _stored_values_for(kind: ScopeKind, role: RoleType) -> list[str]:
    """Every stored value (current or retired) that reads as `role`."""
    taxonomy = get_taxonomy(kind)
    return sorted(v for v in taxonomy.readable if taxonomy.effective(v) == role)


class MembershipLookups:
    """Read-only membership and scope queries used by the access predicates."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def is_superuser(self, identity_id: UUID) -> bool:
        """Check the global super-admin flag on an active identity."""
        result = await self.session.execute(
            select(Identity.is_superuser).where(
                Identity.id == identity_id,
                Identity.is_active == True,  # noqa: E712
            )
        )
        return bool(result.scalar_one_or_none())

    async def tenant_role(self, identity_id: UUID, tenant_id: UUID) -> TenantRole | None:
        """Get identity's effective role in a live tenant, or None."""
        result = await self.session.execute(
            select(TenantMembership.role)
            .join(Tenant, Tenant.id == TenantMembership.tenant_id)
            .where(
                TenantMembership.identity_id == identity_id,
                TenantMembership.tenant_id == tenant_id,
                TenantMembership.is_active == True,  # noqa: E712
                Tenant.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        role = effective_role(ScopeKind.TENANT, result.scalar_one_or_none())
        return role if isinstance(role, TenantRole) else None

    async def is_tenant_member(self, identity_id: UUID, tenant_id: UUID) -> bool:
        """Check for any active membership in a live tenant."""
        result = await self.session.execute(
            select(TenantMembership.identity_id)
            .join(Tenant, Tenant.id == TenantMembership.tenant_id)
            .where(
                TenantMembership.identity_id == identity_id,
                TenantMembership.tenant_id == tenant_id,
                TenantMembership.is_active == True,  # noqa: E712
                Tenant.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return result.first() is not None

    async def is_tenant_admin(self, identity_id: UUID, tenant_id: UUID) -> bool:
        return await self.tenant_role(identity_id, tenant_id) == TenantRole.ADMIN

    async def role_in_scope(self, identity_id: UUID, scope: ScopeRef) -> RoleType | None:
        """Get identity's effective role on a scope of any kind."""
        if scope.kind == ScopeKind.TENANT:
            return await self.tenant_role(identity_id, scope.id)

        scope_table, membership_table, scope_column = _LEAF_TABLES[scope.kind]
        result = await self.session.execute(
            select(membership_table.role)
            .join(scope_table, scope_table.id == scope_column)
            .where(
                membership_table.identity_id == identity_id,
                scope_column == scope.id,
                scope_table.deleted_at.is_(None),
            )
        )
        return effective_role(scope.kind, result.scalar_one_or_none())

    async def has_leaf_membership(self, identity_id: UUID, scope: ScopeRef) -> bool:
        """Check for a membership row on a live project or engagement."""
        if scope.kind == ScopeKind.TENANT:
            return False
        scope_table, membership_table, scope_column = _LEAF_TABLES[scope.kind]
        result = await self.session.execute(
            select(membership_table.identity_id)
            .join(scope_table, scope_table.id == scope_column)
            .where(
                membership_table.identity_id == identity_id,
                scope_column == scope.id,
                scope_table.deleted_at.is_(None),
            )
        )
        return result.first() is not None

    async def role_in_project(self, identity_id: UUID, project_id: UUID) -> RoleType | None:
        return await self.role_in_scope(identity_id, ScopeRef(ScopeKind.PROJECT, project_id))

    async def role_in_engagement(
        self, identity_id: UUID, engagement_id: UUID
    ) -> RoleType | None:
        return await self.role_in_scope(
            identity_id, ScopeRef(ScopeKind.ENGAGEMENT, engagement_id)
        )

    async def tenant_of(self, scope: ScopeRef) -> UUID | None:
        """Resolve the owning tenant of a scope.

        Returns None for unknown or soft-deleted scopes, for scopes whose
        tenant is soft-deleted, and for leaf scopes without a tenant.
        """
        if scope.kind == ScopeKind.TENANT:
            tenant_id: UUID | None = scope.id
        else:
            scope_table, _, _ = _LEAF_TABLES[scope.kind]
            result = await self.session.execute(
                select(scope_table.tenant_id).where(
                    scope_table.id == scope.id,
                    scope_table.deleted_at.is_(None),
                )
            )
            tenant_id = result.scalar_one_or_none()
            if tenant_id is None:
                return None

        result = await self.session.execute(
            select(Tenant.id).where(
                Tenant.id == tenant_id,
                Tenant.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return result.scalar_one_or_none()

    async def scope_exists(self, scope: ScopeRef) -> bool:
        """Check the scope row exists and is not soft-deleted."""
        if scope.kind == ScopeKind.TENANT:
            return await self.tenant_of(scope) is not None
        scope_table, _, _ = _LEAF_TABLES[scope.kind]
        result = await self.session.execute(
            select(scope_table.id).where(
                scope_table.id == scope.id,
                scope_table.deleted_at.is_(None),
            )
        )
        return result.first() is not None

    async def tenant_ids_for(self, identity_id: UUID) -> set[UUID]:
        """Live tenants where identity holds an active membership."""
        result = await self.session.execute(
            select(TenantMembership.tenant_id)
            .join(Tenant, Tenant.id == TenantMembership.tenant_id)
            .where(
                TenantMembership.identity_id == identity_id,
                TenantMembership.is_active == True,  # noqa: E712
                Tenant.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return set(result.scalars().all())

    async def admin_tenant_ids_for(self, identity_id: UUID) -> set[UUID]:
        """Live tenants where identity is an active tenant-admin."""
        result = await self.session.execute(
            select(TenantMembership.tenant_id)
            .join(Tenant, Tenant.id == TenantMembership.tenant_id)
            .where(
                TenantMembership.identity_id == identity_id,
                TenantMembership.is_active == True,  # noqa: E712
                TenantMembership.role.in_(  # type: ignore[attr-defined]
                    _stored_values_for(ScopeKind.TENANT, TenantRole.ADMIN)
                ),
                Tenant.deleted_at.is_(None),  # type: ignore[union-attr]
            )
        )
        return set(result.scalars().all())

    async def member_scope_ids(self, identity_id: UUID, kind: ScopeKind) -> set[UUID]:
        """Live leaf scopes where identity has a membership row."""
        if kind == ScopeKind.TENANT:
            return await self.tenant_ids_for(identity_id)
        scope_table, membership_table, scope_column = _LEAF_TABLES[kind]
        result = await self.session.execute(
            select(scope_column)
            .join(scope_table, scope_table.id == scope_column)
            .where(
                membership_table.identity_id == identity_id,
                scope_table.deleted_at.is_(None),
            )
        )
        return set(result.scalars().all())

    async def scope_tenants(self, kind: ScopeKind, scope_ids: set[UUID]) -> dict[UUID, UUID]:
        """Map live leaf scope ids to their owning tenant (tenant-less omitted)."""
        if not scope_ids or kind == ScopeKind.TENANT:
            return {}
        scope_table, _, _ = _LEAF_TABLES[kind]
        result = await self.session.execute(
            select(scope_table.id, scope_table.tenant_id).where(
                scope_table.id.in_(list(scope_ids)),
                scope_table.tenant_id.is_not(None),
                scope_table.deleted_at.is_(None),
            )
        )
        return {row[0]: row[1] for row in result.all()}

    async def scope_ids_in_tenants(self, kind: ScopeKind, tenant_ids: set[UUID]) -> set[UUID]:
        """Live leaf scopes owned by any of the given tenants."""
        if not tenant_ids:
            return set()
        if kind == ScopeKind.TENANT:
            return set(tenant_ids)
        scope_table, _, _ = _LEAF_TABLES[kind]
        result = await self.session.execute(
            select(scope_table.id).where(
                scope_table.tenant_id.in_(list(tenant_ids)),
                scope_table.deleted_at.is_(None),
            )
        )
        return set(result.scalars().all())

    async def all_scope_ids(self, kind: ScopeKind) -> set[UUID]:
        """Every live scope of a kind (super-admin view)."""
        if kind == ScopeKind.TENANT:
            result = await self.session.execute(
                select(Tenant.id).where(Tenant.deleted_at.is_(None))  # type: ignore[union-attr]
            )
        else:
            scope_table, _, _ = _LEAF_TABLES[kind]
            result = await self.session.execute(
                select(scope_table.id).where(scope_table.deleted_at.is_(None))
            )
        return set(result.scalars().all())
