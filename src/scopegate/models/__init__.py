"""Model exports.

Import from here: `from src.scopegate.models import Tenant, ProjectMembership`
"""

# Enums
from src.scopegate.models.access_token import AccessToken
from src.scopegate.models.enums import (
    AccessTokenStatus,
    EngagementRole,
    PortalPermission,
    ProjectRole,
    ScopeKind,
    TenantRole,
)
from src.scopegate.models.identity import Identity
from src.scopegate.models.membership import (
    EngagementMembership,
    ProjectMembership,
    TenantMembership,
)
from src.scopegate.models.role_backup import RoleMigrationBackup
from src.scopegate.models.scope import Engagement, Project
from src.scopegate.models.scoped import ScopedRecord
from src.scopegate.models.tenant import Tenant

__all__ = [
    # Enums
    "AccessTokenStatus",
    "EngagementRole",
    "PortalPermission",
    "ProjectRole",
    "ScopeKind",
    "TenantRole",
    # Models
    "AccessToken",
    "Engagement",
    "EngagementMembership",
    "Identity",
    "Project",
    "ProjectMembership",
    "RoleMigrationBackup",
    "ScopedRecord",
    "Tenant",
    "TenantMembership",
]
