"""Unit tests for versioned role taxonomies."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from src.scopegate.authz import DEFAULT_WRITE_ROLES, effective_role, get_taxonomy, validate_role
from src.scopegate.authz.taxonomy import normalize_roles
from src.scopegate.core.exceptions import InvalidRoleError
from src.scopegate.models import EngagementRole, ProjectRole, ScopeKind, TenantRole

pytestmark = pytest.mark.unit


class TestEffectiveRole:
    def test_retired_tenant_owner_reads_as_admin(self):
        assert effective_role(ScopeKind.TENANT, "owner") == TenantRole.ADMIN

    def test_retired_project_admin_reads_as_supplier_manager(self):
        assert effective_role(ScopeKind.PROJECT, "admin") == ProjectRole.SUPPLIER_MANAGER

    def test_engagement_admin_is_current(self):
        assert effective_role(ScopeKind.ENGAGEMENT, "admin") == EngagementRole.ADMIN

    def test_unknown_and_missing_values(self):
        assert effective_role(ScopeKind.PROJECT, "overlord") is None
        assert effective_role(ScopeKind.TENANT, None) is None

    def test_readable_includes_retired(self):
        taxonomy = get_taxonomy(ScopeKind.TENANT)
        assert "owner" in taxonomy.readable
        assert "owner" not in taxonomy.allowed
        assert taxonomy.version == 2


class TestValidateRole:
    def test_current_values_pass(self):
        assert validate_role(ScopeKind.PROJECT, ProjectRole.VIEWER) == "viewer"
        assert validate_role(ScopeKind.TENANT, "member") == "member"

    def test_retired_value_is_rejected_with_replacement_hint(self):
        with pytest.raises(InvalidRoleError, match="use 'admin'"):
            validate_role(ScopeKind.TENANT, "owner")
        with pytest.raises(InvalidRoleError, match="use 'supplier_manager'"):
            validate_role(ScopeKind.PROJECT, "admin")

    def test_role_from_another_kind_is_rejected(self):
        with pytest.raises(InvalidRoleError, match="not valid for project"):
            validate_role(ScopeKind.PROJECT, "evaluator")


class TestNormalizeRoles:
    def test_drops_retired_and_unknown(self):
        roles = normalize_roles(ScopeKind.PROJECT, ["admin", "viewer", "nonsense", 7])
        assert roles == frozenset({"viewer"})

    def test_retired_tenant_owner_is_dropped(self):
        roles = normalize_roles(ScopeKind.TENANT, [TenantRole.ADMIN, "owner"])
        assert roles == frozenset({"admin"})

    def test_accepts_enums(self):
        roles = normalize_roles(ScopeKind.ENGAGEMENT, {EngagementRole.EVALUATOR})
        assert roles == frozenset({"evaluator"})

    @pytest.mark.parametrize("value", [None, "admin", b"admin", 3])
    def test_non_collections_are_invalid(self, value):
        assert normalize_roles(ScopeKind.TENANT, value) is None

    def test_default_write_roles(self):
        assert DEFAULT_WRITE_ROLES[ScopeKind.TENANT] == {"admin"}
        assert DEFAULT_WRITE_ROLES[ScopeKind.PROJECT] == {"supplier_manager"}
        assert DEFAULT_WRITE_ROLES[ScopeKind.ENGAGEMENT] == {"admin"}


@given(
    kind=st.sampled_from(list(ScopeKind)),
    value=st.one_of(st.text(max_size=30), st.sampled_from(["owner", "admin", "member"])),
)
def test_effective_role_is_total_and_current(kind, value):
    """effective_role never raises and only yields current-taxonomy values."""
    role = effective_role(kind, value)
    assert role is None or role.value in get_taxonomy(kind).allowed


@given(
    kind=st.sampled_from(list(ScopeKind)),
    values=st.lists(st.text(max_size=20), max_size=8),
)
def test_normalized_roles_are_subset_of_allowed(kind, values):
    assert normalize_roles(kind, values) <= get_taxonomy(kind).allowed
