"""Membership management service.

Writes only. Every role passes validate_role before it is stored; reads for
access decisions go through MembershipLookups.
"""

from typing import cast
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.authz import AccessPolicy, ScopeRef, validate_role
from src.scopegate.core.exceptions import (
    MembershipConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from src.scopegate.core.logging import get_logger
from src.scopegate.models import (
    EngagementMembership,
    ProjectMembership,
    ScopeKind,
    TenantMembership,
    TenantRole,
)
from src.scopegate.repositories import (
    EngagementMembershipRepository,
    EngagementRepository,
    ProjectMembershipRepository,
    ProjectRepository,
    TenantMembershipRepository,
    TenantRepository,
)

logger = get_logger(__name__)

Membership = TenantMembership | ProjectMembership | EngagementMembership


class MembershipService:
    """Grant, change and revoke memberships at every scope level."""

    def __init__(
        self,
        tenant_repo: TenantRepository,
        project_repo: ProjectRepository,
        engagement_repo: EngagementRepository,
        tenant_member_repo: TenantMembershipRepository,
        project_member_repo: ProjectMembershipRepository,
        engagement_member_repo: EngagementMembershipRepository,
        session: AsyncSession,
    ):
        self.tenant_repo = tenant_repo
        self.project_repo = project_repo
        self.engagement_repo = engagement_repo
        self.tenant_member_repo = tenant_member_repo
        self.project_member_repo = project_member_repo
        self.engagement_member_repo = engagement_member_repo
        self.session = session

    @classmethod
    def from_session(cls, session: AsyncSession) -> "MembershipService":
        return cls(
            TenantRepository(session),
            ProjectRepository(session),
            EngagementRepository(session),
            TenantMembershipRepository(session),
            ProjectMembershipRepository(session),
            EngagementMembershipRepository(session),
            session,
        )

    async def _require_scope(self, scope: ScopeRef) -> None:
        if scope.kind == ScopeKind.TENANT:
            found = await self.tenant_repo.get_live(scope.id)
        elif scope.kind == ScopeKind.PROJECT:
            found = await self.project_repo.get_live(scope.id)
        else:
            found = await self.engagement_repo.get_live(scope.id)
        if found is None:
            raise NotFoundError(f"Scope {scope} not found")

    async def _get_membership(self, scope: ScopeRef, identity_id: UUID) -> Membership | None:
        if scope.kind == ScopeKind.TENANT:
            return await self.tenant_member_repo.get_membership(identity_id, scope.id)
        if scope.kind == ScopeKind.PROJECT:
            return await self.project_member_repo.get_membership(identity_id, scope.id)
        return await self.engagement_member_repo.get_membership(identity_id, scope.id)

    def _create_membership(self, scope: ScopeRef, identity_id: UUID, role: str) -> Membership:
        if scope.kind == ScopeKind.TENANT:
            return self.tenant_member_repo.create_membership(identity_id, scope.id, role)
        if scope.kind == ScopeKind.PROJECT:
            return self.project_member_repo.create_membership(identity_id, scope.id, role)
        return self.engagement_member_repo.create_membership(identity_id, scope.id, role)

    async def grant(self, scope: ScopeRef, identity_id: UUID, role: str) -> Membership:
        """Create a membership.

        Raises:
            InvalidRoleError: Role not in the current taxonomy for the scope kind
            NotFoundError: Scope does not exist or is soft-deleted
            MembershipConflictError: A row already exists for the pair, including
                a deactivated tenant membership (use reactivate_tenant_membership)
        """
        role = validate_role(scope.kind, role)
        try:
            await self._require_scope(scope)
            existing = await self._get_membership(scope, identity_id)
            if existing is not None:
                if isinstance(existing, TenantMembership) and not existing.is_active:
                    raise MembershipConflictError(
                        "Membership is deactivated; reactivate it explicitly"
                    )
                raise MembershipConflictError(f"Identity is already a member of {scope}")

            membership = self._create_membership(scope, identity_id, role)
            await self.session.commit()
            await self.session.refresh(membership)
        except IntegrityError as e:
            await self.session.rollback()
            raise MembershipConflictError(f"Identity is already a member of {scope}") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Membership granted",
            scope=str(scope),
            identity_id=str(identity_id),
            role=role,
        )
        return membership

    async def change_role(self, scope: ScopeRef, identity_id: UUID, role: str) -> Membership:
        """Replace the role on an existing membership. Last writer wins."""
        role = validate_role(scope.kind, role)
        try:
            membership = await self._get_membership(scope, identity_id)
            if membership is None or (
                isinstance(membership, TenantMembership) and not membership.is_active
            ):
                raise NotFoundError(f"Identity is not a member of {scope}")
            previous = membership.role
            membership.role = role
            await self.session.commit()
            await self.session.refresh(membership)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Membership role changed",
            scope=str(scope),
            identity_id=str(identity_id),
            old_role=previous,
            new_role=role,
        )
        return membership

    async def assign(self, scope: ScopeRef, identity_id: UUID, role: str) -> Membership:
        """Grant when absent, change the role when present."""
        existing = await self._get_membership(scope, identity_id)
        if existing is None:
            return await self.grant(scope, identity_id, role)
        if isinstance(existing, TenantMembership) and not existing.is_active:
            raise MembershipConflictError("Membership is deactivated; reactivate it explicitly")
        return await self.change_role(scope, identity_id, role)

    async def revoke(self, scope: ScopeRef, identity_id: UUID) -> None:
        """Remove a membership.

        Tenant memberships are deactivated; project and engagement memberships
        are deleted. Takes effect on the next predicate evaluation.
        """
        try:
            membership = await self._get_membership(scope, identity_id)
            if membership is None or (
                isinstance(membership, TenantMembership) and not membership.is_active
            ):
                raise NotFoundError(f"Identity is not a member of {scope}")
            if isinstance(membership, TenantMembership):
                membership.is_active = False
            else:
                await self.session.delete(membership)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Membership revoked", scope=str(scope), identity_id=str(identity_id))

    async def grant_tenant_membership(
        self, identity_id: UUID, tenant_id: UUID, role: str = TenantRole.MEMBER.value
    ) -> TenantMembership:
        membership = await self.grant(ScopeRef(ScopeKind.TENANT, tenant_id), identity_id, role)
        return cast(TenantMembership, membership)

    async def reactivate_tenant_membership(
        self, identity_id: UUID, tenant_id: UUID, role: str | None = None
    ) -> TenantMembership:
        """Reactivate a deactivated tenant membership, optionally with a new role."""
        if role is not None:
            role = validate_role(ScopeKind.TENANT, role)
        try:
            membership = await self.tenant_member_repo.get_membership(identity_id, tenant_id)
            if membership is None:
                raise NotFoundError("Tenant membership not found")
            if membership.is_active:
                raise MembershipConflictError("Tenant membership is already active")
            membership.is_active = True
            if role is not None:
                membership.role = role
            await self.session.commit()
            await self.session.refresh(membership)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Tenant membership reactivated",
            tenant_id=str(tenant_id),
            identity_id=str(identity_id),
            role=membership.role,
        )
        return membership

    async def set_default_engagement(
        self, identity_id: UUID, engagement_id: UUID
    ) -> EngagementMembership:
        """Mark one engagement as the identity's default, clearing any other."""
        try:
            membership = await self.engagement_member_repo.get_membership(
                identity_id, engagement_id
            )
            if membership is None:
                raise NotFoundError("Identity is not a member of the engagement")
            await self.engagement_member_repo.clear_defaults(identity_id)
            membership.is_default = True
            await self.session.commit()
            await self.session.refresh(membership)
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Default engagement set",
            identity_id=str(identity_id),
            engagement_id=str(engagement_id),
        )
        return membership

    async def list_members(
        self, policy: AccessPolicy, scope: ScopeRef, cursor: str | None, limit: int
    ) -> tuple[list[Membership], str | None, bool]:
        """List a scope's members. The caller must be able to access the scope.

        Raises:
            PermissionDeniedError: If policy.can_access(scope) is False
        """
        if not await policy.can_access(scope):
            raise PermissionDeniedError(f"No access to {scope}")
        if scope.kind == ScopeKind.TENANT:
            return await self.tenant_member_repo.list_for_tenant_paginated(
                scope.id, cursor, limit
            )  # type: ignore[return-value]
        if scope.kind == ScopeKind.PROJECT:
            return await self.project_member_repo.list_for_project_paginated(
                scope.id, cursor, limit
            )  # type: ignore[return-value]
        return await self.engagement_member_repo.list_for_engagement_paginated(
            scope.id, cursor, limit
        )  # type: ignore[return-value]
