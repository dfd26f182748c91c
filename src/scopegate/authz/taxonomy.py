"""Versioned role taxonomies per scope kind.

Each taxonomy lists the values writes may store and the retired values rows
may still hold until reclassified. Reads go through effective_role(), so a
retired value carries the authority of its replacement; writes go through
validate_role(), which accepts the current taxonomy only.
"""

from dataclasses import dataclass, field
from enum import Enum

from src.scopegate.core.exceptions import InvalidRoleError
from src.scopegate.models.enums import EngagementRole, ProjectRole, ScopeKind, TenantRole

RoleType = TenantRole | ProjectRole | EngagementRole


@dataclass(frozen=True)
class RoleTaxonomy:
    """One version of the allowed role set for a scope kind."""

    kind: ScopeKind
    version: int
    role_enum: type[Enum]
    retired: dict[str, str] = field(default_factory=dict)

    @property
    def allowed(self) -> frozenset[str]:
        return frozenset(member.value for member in self.role_enum)

    @property
    def readable(self) -> frozenset[str]:
        """Values a stored row may legitimately hold during a migration window."""
        return self.allowed | frozenset(self.retired)

    def effective(self, value: str | None) -> RoleType | None:
        if value is None:
            return None
        value = self.retired.get(value, value)
        try:
            return self.role_enum(value)  # type: ignore[return-value]
        except ValueError:
            return None


# History:
#   tenant  v1 {owner, admin, member}            -> v2 {admin, member}
#   project v1 {admin, supplier_manager, ...}    -> v2 (admin retired)
TAXONOMIES: dict[ScopeKind, RoleTaxonomy] = {
    ScopeKind.TENANT: RoleTaxonomy(
        kind=ScopeKind.TENANT,
        version=2,
        role_enum=TenantRole,
        retired={"owner": TenantRole.ADMIN.value},
    ),
    ScopeKind.PROJECT: RoleTaxonomy(
        kind=ScopeKind.PROJECT,
        version=2,
        role_enum=ProjectRole,
        retired={"admin": ProjectRole.SUPPLIER_MANAGER.value},
    ),
    ScopeKind.ENGAGEMENT: RoleTaxonomy(
        kind=ScopeKind.ENGAGEMENT,
        version=1,
        role_enum=EngagementRole,
    ),
}

# Default role sets for can_write when a call site passes none
DEFAULT_WRITE_ROLES: dict[ScopeKind, frozenset[str]] = {
    ScopeKind.TENANT: frozenset({TenantRole.ADMIN.value}),
    ScopeKind.PROJECT: frozenset({ProjectRole.SUPPLIER_MANAGER.value}),
    ScopeKind.ENGAGEMENT: frozenset({EngagementRole.ADMIN.value}),
}


def get_taxonomy(kind: ScopeKind) -> RoleTaxonomy:
    return TAXONOMIES[kind]


def effective_role(kind: ScopeKind, value: str | None) -> RoleType | None:
    """Map a stored role value to its current-taxonomy role.

    Retired values resolve to their replacement; unknown values to None.
    """
    return TAXONOMIES[kind].effective(value)


def validate_role(kind: ScopeKind, value: str | Enum) -> str:
    """Return the role value if the current taxonomy allows it.

    Raises:
        InvalidRoleError: If the value is retired or unknown.
    """
    raw = value.value if isinstance(value, Enum) else value
    taxonomy = TAXONOMIES[kind]
    if raw in taxonomy.allowed:
        return raw
    if raw in taxonomy.retired:
        raise InvalidRoleError(
            f"Role '{raw}' is retired for {kind.value} scopes; "
            f"use '{taxonomy.retired[raw]}'"
        )
    raise InvalidRoleError(f"Role '{raw}' is not valid for {kind.value} scopes")


def normalize_roles(kind: ScopeKind, roles: object) -> frozenset[str] | None:
    """Normalize a caller-supplied role collection to current-taxonomy values.

    Returns None when the input is not an iterable of roles. Retired and
    unknown entries are dropped; retired values alias only when read from
    stored rows through effective_role().
    """
    if roles is None or isinstance(roles, (str, bytes)):
        return None
    try:
        items = list(roles)  # type: ignore[call-overload]
    except TypeError:
        return None
    allowed = get_taxonomy(kind).allowed
    result: set[str] = set()
    for item in items:
        raw = item.value if isinstance(item, Enum) else item
        if isinstance(raw, str) and raw in allowed:
            result.add(raw)
    return frozenset(result)
