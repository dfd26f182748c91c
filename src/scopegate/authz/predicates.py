"""Scope-access predicates.

Every predicate answers for the identity the policy is bound to and follows
the same decision shape:

    super-admin
    OR tenant-admin of the owning tenant
    OR (the membership condition for the specific predicate)

Predicates never raise. A malformed scope, an unknown kind or id, a missing
identity, or a soft-deleted tenant or scope all evaluate to False. Nothing is
cached between calls, so membership changes take effect on the next call.
"""

from collections.abc import Iterable
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.api.context.identity_context import get_current_identity_id
from src.scopegate.authz.attachment import Action, PolicyRegistry, policy_registry
from src.scopegate.authz.elevated import MembershipLookups
from src.scopegate.authz.scopes import ScopeRef, scope_of
from src.scopegate.authz.taxonomy import DEFAULT_WRITE_ROLES, RoleType, normalize_roles
from src.scopegate.core.config import get_settings
from src.scopegate.core.logging import get_logger
from src.scopegate.models import ScopeKind, TenantRole

logger = get_logger(__name__)

ScopeInput = ScopeRef | str | None


class AccessPolicy:
    """Access predicates bound to one acting identity."""

    def __init__(
        self,
        lookups: MembershipLookups,
        identity_id: UUID | None,
        draft_statuses: Iterable[str] | None = None,
        registry: PolicyRegistry | None = None,
    ):
        self.lookups = lookups
        self.identity_id = identity_id
        self.draft_statuses = frozenset(
            draft_statuses if draft_statuses is not None else get_settings().draft_statuses
        )
        self.registry = registry if registry is not None else policy_registry

    @classmethod
    def for_current_identity(cls, session: AsyncSession, **kwargs: Any) -> "AccessPolicy":
        """Bind to the identity in the current request context."""
        return cls(MembershipLookups(session), get_current_identity_id(), **kwargs)

    def _deny(self, predicate: str, scope: ScopeInput, reason: str) -> bool:
        logger.debug(
            "Access denied",
            predicate=predicate,
            scope=str(scope),
            identity_id=str(self.identity_id) if self.identity_id else None,
            reason=reason,
        )
        return False

    async def _is_superuser(self, identity_id: UUID) -> bool:
        return await self.lookups.is_superuser(identity_id)

    async def _gate(
        self, predicate: str, scope: ScopeInput, roles: frozenset[str] | None
    ) -> bool:
        """Shared shape of can_write / has_any_role.

        roles=None only reaches here for an invalid role collection, which
        leaves the super-admin and tenant-admin bypasses as the only way in.
        """
        ref = ScopeRef.parse(scope)
        if ref is None or self.identity_id is None:
            return self._deny(predicate, scope, "unresolvable")

        if await self._is_superuser(self.identity_id):
            return await self.lookups.scope_exists(ref)

        tenant_id = await self.lookups.tenant_of(ref)
        if tenant_id is None:
            return self._deny(predicate, scope, "no live owning tenant")

        if await self.lookups.is_tenant_admin(self.identity_id, tenant_id):
            return True

        if not roles:
            return self._deny(predicate, scope, "no qualifying role")

        role = await self.lookups.role_in_scope(self.identity_id, ref)
        if role is not None and role.value in roles:
            return True
        return self._deny(predicate, scope, "no qualifying role")

    async def can_access(self, scope: ScopeInput) -> bool:
        """Can the identity see the scope at all.

        Leaf scope: super-admin OR tenant-admin of the owning tenant OR
        (active member of the owning tenant AND a membership row on the leaf).
        Tenant scope: super-admin OR active tenant member.
        """
        ref = ScopeRef.parse(scope)
        if ref is None or self.identity_id is None:
            return self._deny("can_access", scope, "unresolvable")

        if await self._is_superuser(self.identity_id):
            return await self.lookups.scope_exists(ref)

        tenant_id = await self.lookups.tenant_of(ref)
        if tenant_id is None:
            return self._deny("can_access", scope, "no live owning tenant")

        if ref.kind == ScopeKind.TENANT:
            if await self.lookups.is_tenant_member(self.identity_id, tenant_id):
                return True
            return self._deny("can_access", scope, "not a tenant member")

        if await self.lookups.is_tenant_admin(self.identity_id, tenant_id):
            return True

        if await self.lookups.is_tenant_member(
            self.identity_id, tenant_id
        ) and await self.lookups.has_leaf_membership(self.identity_id, ref):
            return True
        return self._deny("can_access", scope, "no membership chain")

    async def can_write(
        self, scope: ScopeInput, allowed_roles: Iterable[Any] | None = None
    ) -> bool:
        """Can the identity mutate data in the scope.

        super-admin OR tenant-admin (full bypass) OR leaf role in allowed_roles.
        allowed_roles=None uses the default for the scope kind.
        """
        ref = ScopeRef.parse(scope)
        if ref is None:
            return self._deny("can_write", scope, "unresolvable")
        return await self._gate("can_write", ref, self._write_roles(ref.kind, allowed_roles))

    async def has_any_role(self, scope: ScopeInput, roles: Iterable[Any]) -> bool:
        """Same shape as can_write, for read-adjacent gating.

        A True result does not imply mutation rights.
        """
        ref = ScopeRef.parse(scope)
        if ref is None:
            return self._deny("has_any_role", scope, "unresolvable")
        return await self._gate("has_any_role", ref, normalize_roles(ref.kind, roles))

    def _write_roles(
        self, kind: ScopeKind, allowed_roles: Iterable[Any] | None
    ) -> frozenset[str] | None:
        if allowed_roles is None:
            return DEFAULT_WRITE_ROLES[kind]
        return normalize_roles(kind, allowed_roles)

    async def role_in(self, scope: ScopeInput) -> RoleType | None:
        """The identity's effective role on the scope, or None."""
        ref = ScopeRef.parse(scope)
        if ref is None or self.identity_id is None:
            return None
        return await self.lookups.role_in_scope(self.identity_id, ref)

    async def accessible_scope_ids(self, kind: ScopeKind | str) -> set[UUID]:
        """Every live scope of `kind` for which can_access is True."""
        try:
            kind = ScopeKind(kind)
        except ValueError:
            return set()
        if self.identity_id is None:
            return set()

        if await self._is_superuser(self.identity_id):
            return await self.lookups.all_scope_ids(kind)

        if kind == ScopeKind.TENANT:
            return await self.lookups.tenant_ids_for(self.identity_id)

        admin_tenants = await self.lookups.admin_tenant_ids_for(self.identity_id)
        scope_ids = await self.lookups.scope_ids_in_tenants(kind, admin_tenants)

        member_tenants = await self.lookups.tenant_ids_for(self.identity_id)
        member_scopes = await self.lookups.member_scope_ids(self.identity_id, kind)
        owners = await self.lookups.scope_tenants(kind, member_scopes)
        scope_ids |= {
            scope_id for scope_id, tenant_id in owners.items() if tenant_id in member_tenants
        }
        return scope_ids

    def is_owner_draft(self, record: Any) -> bool:
        """Creator of the record, and the record is still in a draft status."""
        if self.identity_id is None:
            return False
        created_by = getattr(record, "created_by", None)
        status = getattr(record, "status", None)
        return created_by == self.identity_id and status in self.draft_statuses

    async def can_write_record(
        self,
        record: Any,
        allowed_roles: Iterable[Any] | None = None,
        allow_owner_draft: bool = False,
    ) -> bool:
        """can_write on the record's root scope, OR the owner-draft bypass if allowed."""
        if allow_owner_draft and self.is_owner_draft(record):
            return True
        return await self.can_write(scope_of(record), allowed_roles)

    async def is_tenant_admin(self, tenant_id: UUID) -> bool:
        if self.identity_id is None:
            return False
        return await self.lookups.tenant_role(self.identity_id, tenant_id) == TenantRole.ADMIN

    async def authorize(self, entity: str, action: Action | str, target: Any) -> bool:
        """Evaluate the registered policy for an entity action.

        `target` is a scoped record, a ScopeRef, or a "<kind>:<uuid>" string.
        Unregistered entities and unknown actions are denied.
        """
        policy = self.registry.get(entity)
        if policy is None:
            return self._deny("authorize", entity, "no policy registered")
        try:
            action = Action(action)
        except ValueError:
            return self._deny("authorize", entity, f"unknown action {action!r}")

        is_record = not isinstance(target, (ScopeRef, str)) and target is not None
        scope = scope_of(target) if is_record else ScopeRef.parse(target)
        roles = policy.roles_for(action)

        if action == Action.READ:
            if roles is None:
                return await self.can_access(scope)
            return await self.has_any_role(scope, roles)

        if is_record:
            return await self.can_write_record(
                target,
                roles,
                allow_owner_draft=action in policy.owner_draft_actions,
            )
        return await self.can_write(scope, roles)
