"""FastAPI dependency injection definitions.

Re-exports all dependencies for convenience.
"""

# Access predicates
from src.scopegate.api.dependencies.access import (
    Policy,
    get_access_policy,
    require_scope_access,
    require_scope_roles,
)

# Database
from src.scopegate.api.dependencies.db import DBSession, get_db_session

# Identity
from src.scopegate.api.dependencies.identity import (
    CurrentIdentity,
    SuperIdentity,
    get_current_identity,
    require_superuser,
)

# Services
from src.scopegate.api.dependencies.services import (
    AccessTokenServiceDep,
    MembershipServiceDep,
    TenantServiceDep,
    get_access_token_service,
    get_membership_service,
    get_tenant_service,
)

__all__ = [
    # Access
    "Policy",
    "get_access_policy",
    "require_scope_access",
    "require_scope_roles",
    # Database
    "DBSession",
    "get_db_session",
    # Identity
    "CurrentIdentity",
    "SuperIdentity",
    "get_current_identity",
    "require_superuser",
    # Services
    "AccessTokenServiceDep",
    "MembershipServiceDep",
    "TenantServiceDep",
    "get_access_token_service",
    "get_membership_service",
    "get_tenant_service",
]
