from src.scopegate.services.membership_service import MembershipService
from src.scopegate.services.role_migration_service import (
    ReclassificationResult,
    RoleMigrationService,
    RoleReclassification,
)
from src.scopegate.services.tenant_service import TenantService
from src.scopegate.services.token_service import AccessTokenService, ConsumeResult, TokenGrant

__all__ = [
    "AccessTokenService",
    "ConsumeResult",
    "MembershipService",
    "ReclassificationResult",
    "RoleMigrationService",
    "RoleReclassification",
    "TenantService",
    "TokenGrant",
]
