"""Authorization exports.

Import from here: `from src.scopegate.authz import AccessPolicy, ScopeRef`
"""

from src.scopegate.authz.attachment import Action, EntityPolicy, PolicyRegistry, policy_registry
from src.scopegate.authz.elevated import MembershipLookups
from src.scopegate.authz.predicates import AccessPolicy
from src.scopegate.authz.scopes import ScopeRef, attach_to_parent, attach_to_scope, scope_of
from src.scopegate.authz.taxonomy import (
    DEFAULT_WRITE_ROLES,
    TAXONOMIES,
    RoleTaxonomy,
    effective_role,
    get_taxonomy,
    validate_role,
)

__all__ = [
    "DEFAULT_WRITE_ROLES",
    "TAXONOMIES",
    "AccessPolicy",
    "Action",
    "EntityPolicy",
    "MembershipLookups",
    "PolicyRegistry",
    "RoleTaxonomy",
    "ScopeRef",
    "attach_to_parent",
    "attach_to_scope",
    "effective_role",
    "get_taxonomy",
    "policy_registry",
    "scope_of",
    "validate_role",
]
