"""Unit tests for access predicates against mocked membership lookups."""

from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.scopegate.authz import (
    AccessPolicy,
    Action,
    EntityPolicy,
    MembershipLookups,
    PolicyRegistry,
    ScopeRef,
)
from src.scopegate.models import EngagementRole, ProjectRole, ScopeKind, TenantRole

pytestmark = pytest.mark.unit

TENANT_ID = uuid4()
PROJECT = ScopeRef(ScopeKind.PROJECT, uuid4())
ENGAGEMENT = ScopeRef(ScopeKind.ENGAGEMENT, uuid4())


def make_lookups(
    superuser: bool = False,
    tenant_id=TENANT_ID,
    tenant_admin: bool = False,
    tenant_member: bool = False,
    leaf_role=None,
    exists: bool = True,
) -> AsyncMock:
    lookups = AsyncMock(spec=MembershipLookups)
    lookups.is_superuser.return_value = superuser
    lookups.scope_exists.return_value = exists
    lookups.tenant_of.return_value = tenant_id
    lookups.is_tenant_admin.return_value = tenant_admin
    lookups.is_tenant_member.return_value = tenant_member or tenant_admin
    lookups.has_leaf_membership.return_value = leaf_role is not None
    lookups.role_in_scope.return_value = leaf_role
    lookups.tenant_role.return_value = (
        TenantRole.ADMIN if tenant_admin else TenantRole.MEMBER if tenant_member else None
    )
    return lookups


def make_policy(lookups, identity_id=None, registry=None) -> AccessPolicy:
    return AccessPolicy(
        lookups,
        identity_id if identity_id is not None else uuid4(),
        draft_statuses=["draft"],
        registry=registry or PolicyRegistry(),
    )


class TestUnresolvableInput:
    @pytest.mark.parametrize("scope", [None, "", "project:xyz", "planet:1", 123])
    async def test_malformed_scope_is_denied(self, scope):
        policy = make_policy(make_lookups(superuser=True))
        assert await policy.can_access(scope) is False
        assert await policy.can_write(scope) is False
        assert await policy.has_any_role(scope, ["viewer"]) is False
        assert await policy.role_in(scope) is None

    async def test_no_identity_is_denied_without_lookups(self):
        lookups = make_lookups(superuser=True)
        policy = AccessPolicy(lookups, None, draft_statuses=["draft"])

        assert await policy.can_access(PROJECT) is False
        assert await policy.can_write(PROJECT) is False
        assert await policy.accessible_scope_ids(ScopeKind.PROJECT) == set()
        assert await policy.is_tenant_admin(TENANT_ID) is False
        lookups.is_superuser.assert_not_called()

    async def test_unknown_kind_yields_empty_set(self):
        policy = make_policy(make_lookups(superuser=True))
        assert await policy.accessible_scope_ids("workspace") == set()


class TestSuperuser:
    async def test_existing_scope_allowed(self):
        policy = make_policy(make_lookups(superuser=True))
        assert await policy.can_access(PROJECT) is True
        assert await policy.can_write(PROJECT, []) is True

    async def test_superuser_lookup_uses_bound_identity(self):
        identity_id = uuid4()
        lookups = make_lookups(superuser=True)
        policy = make_policy(lookups, identity_id=identity_id)

        await policy.can_access(PROJECT)
        await policy.has_any_role(PROJECT, ["viewer"])
        await policy.accessible_scope_ids(ScopeKind.PROJECT)

        assert lookups.is_superuser.await_count == 3
        for call in lookups.is_superuser.await_args_list:
            assert call.args == (identity_id,)

    async def test_missing_scope_denied(self):
        policy = make_policy(make_lookups(superuser=True, exists=False))
        assert await policy.can_access(ENGAGEMENT) is False
        assert await policy.can_write(ENGAGEMENT) is False


class TestLeafAccess:
    async def test_tenant_admin_bypasses_leaf_membership(self):
        policy = make_policy(make_lookups(tenant_admin=True))
        assert await policy.can_access(PROJECT) is True
        assert await policy.can_write(PROJECT, []) is True

    async def test_leaf_membership_without_tenant_membership_cannot_access(self):
        lookups = make_lookups(leaf_role=ProjectRole.VIEWER)
        lookups.is_tenant_member.return_value = False
        policy = make_policy(lookups)
        assert await policy.can_access(PROJECT) is False

    async def test_tenant_member_with_leaf_row_can_access(self):
        policy = make_policy(make_lookups(tenant_member=True, leaf_role=ProjectRole.VIEWER))
        assert await policy.can_access(PROJECT) is True

    async def test_tenant_member_without_leaf_row_cannot_access(self):
        policy = make_policy(make_lookups(tenant_member=True))
        assert await policy.can_access(PROJECT) is False

    async def test_tenantless_scope_denied_for_non_superuser(self):
        policy = make_policy(make_lookups(tenant_id=None, tenant_admin=True))
        assert await policy.can_access(PROJECT) is False


class TestCanWrite:
    async def test_default_roles_per_kind(self):
        manager = make_policy(make_lookups(leaf_role=ProjectRole.SUPPLIER_MANAGER))
        viewer = make_policy(make_lookups(leaf_role=ProjectRole.VIEWER))
        assert await manager.can_write(PROJECT) is True
        assert await viewer.can_write(PROJECT) is False

    async def test_explicit_roles(self):
        policy = make_policy(make_lookups(leaf_role=EngagementRole.EVALUATOR))
        assert await policy.can_write(ENGAGEMENT, ["evaluator", "admin"]) is True
        assert await policy.can_write(ENGAGEMENT, ["admin"]) is False

    async def test_empty_role_set_leaves_only_bypasses(self):
        policy = make_policy(make_lookups(leaf_role=EngagementRole.ADMIN))
        assert await policy.can_write(ENGAGEMENT, []) is False

    async def test_invalid_role_collection_is_denied_not_raised(self):
        policy = make_policy(make_lookups(leaf_role=EngagementRole.ADMIN))
        assert await policy.can_write(ENGAGEMENT, "admin") is False
        assert await policy.has_any_role(ENGAGEMENT, None) is False

    async def test_retired_role_in_allowed_set_grants_nothing(self):
        policy = make_policy(make_lookups(leaf_role=ProjectRole.SUPPLIER_MANAGER))
        assert await policy.can_write(PROJECT, ["admin"]) is False
        assert await policy.has_any_role(PROJECT, ["admin"]) is False
        assert await policy.can_write(PROJECT, ["admin", "supplier_manager"]) is True


class TestOwnerDraft:
    def test_creator_of_draft(self):
        identity_id = uuid4()
        policy = make_policy(make_lookups(), identity_id=identity_id)
        assert policy.is_owner_draft(SimpleNamespace(created_by=identity_id, status="draft"))

    def test_creator_after_submission(self):
        identity_id = uuid4()
        policy = make_policy(make_lookups(), identity_id=identity_id)
        record = SimpleNamespace(created_by=identity_id, status="submitted")
        assert not policy.is_owner_draft(record)

    def test_draft_of_someone_else(self):
        policy = make_policy(make_lookups())
        assert not policy.is_owner_draft(SimpleNamespace(created_by=uuid4(), status="draft"))


class TestAuthorize:
    @pytest.fixture
    def registry(self) -> PolicyRegistry:
        registry = PolicyRegistry()
        registry.register(
            "requirement",
            EntityPolicy.build(
                update=[EngagementRole.ADMIN, EngagementRole.EVALUATOR],
                delete=[EngagementRole.ADMIN],
                owner_draft=[Action.UPDATE],
            ),
        )
        registry.register("score", EntityPolicy.build(read=[EngagementRole.EVALUATOR]))
        return registry

    def _record(self, created_by, status="draft"):
        return SimpleNamespace(
            scope_kind="engagement", scope_id=ENGAGEMENT.id, created_by=created_by, status=status
        )

    async def test_unregistered_entity_is_denied(self, registry):
        policy = make_policy(make_lookups(superuser=True), registry=registry)
        assert await policy.authorize("invoice", Action.READ, ENGAGEMENT) is False

    async def test_unknown_action_is_denied(self, registry):
        policy = make_policy(make_lookups(superuser=True), registry=registry)
        assert await policy.authorize("requirement", "archive", ENGAGEMENT) is False

    async def test_read_defaults_to_can_access(self, registry):
        lookups = make_lookups(tenant_member=True, leaf_role=EngagementRole.PARTICIPANT)
        policy = make_policy(lookups, registry=registry)
        assert await policy.authorize("requirement", "read", str(ENGAGEMENT)) is True

    async def test_read_with_roles_uses_has_any_role(self, registry):
        participant = make_policy(
            make_lookups(tenant_member=True, leaf_role=EngagementRole.PARTICIPANT),
            registry=registry,
        )
        evaluator = make_policy(
            make_lookups(tenant_member=True, leaf_role=EngagementRole.EVALUATOR),
            registry=registry,
        )
        assert await participant.authorize("score", Action.READ, ENGAGEMENT) is False
        assert await evaluator.authorize("score", Action.READ, ENGAGEMENT) is True

    async def test_owner_draft_update_bypasses_role(self, registry):
        identity_id = uuid4()
        policy = make_policy(
            make_lookups(leaf_role=EngagementRole.PARTICIPANT),
            identity_id=identity_id,
            registry=registry,
        )
        assert await policy.authorize("requirement", Action.UPDATE, self._record(identity_id))
        assert not await policy.authorize(
            "requirement", Action.UPDATE, self._record(identity_id, status="approved")
        )

    async def test_owner_draft_not_granted_for_delete(self, registry):
        identity_id = uuid4()
        policy = make_policy(
            make_lookups(leaf_role=EngagementRole.PARTICIPANT),
            identity_id=identity_id,
            registry=registry,
        )
        assert not await policy.authorize("requirement", Action.DELETE, self._record(identity_id))

    async def test_record_without_scope_is_denied(self, registry):
        policy = make_policy(make_lookups(superuser=True), registry=registry)
        record = SimpleNamespace(scope_kind=None, scope_id=None, created_by=None, status=None)
        assert await policy.authorize("requirement", Action.DELETE, record) is False


class TestPolicyRegistry:
    def test_duplicate_registration_is_rejected(self):
        registry = PolicyRegistry()
        registry.register("requirement", EntityPolicy())
        with pytest.raises(ValueError, match="already registered"):
            registry.register("requirement", EntityPolicy())

    def test_replace_and_listing(self):
        registry = PolicyRegistry()
        registry.register("b", EntityPolicy())
        registry.replace("a", EntityPolicy.build(read=["viewer"]))
        assert "a" in registry
        assert registry.entities() == ["a", "b"]
        assert registry.get("a").read_roles == {"viewer"}
        assert registry.get("missing") is None
