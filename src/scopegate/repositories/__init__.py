"""Repository layer - data access abstraction."""

from src.scopegate.repositories.access_token import AccessTokenRepository
from src.scopegate.repositories.base import BaseRepository
from src.scopegate.repositories.identity import IdentityRepository
from src.scopegate.repositories.membership import (
    EngagementMembershipRepository,
    ProjectMembershipRepository,
    TenantMembershipRepository,
)
from src.scopegate.repositories.role_backup import RoleMigrationBackupRepository
from src.scopegate.repositories.scope import EngagementRepository, ProjectRepository
from src.scopegate.repositories.tenant import TenantRepository

__all__ = [
    # Base
    "BaseRepository",
    # Registry
    "IdentityRepository",
    "TenantRepository",
    # Scopes
    "EngagementRepository",
    "ProjectRepository",
    # Memberships
    "EngagementMembershipRepository",
    "ProjectMembershipRepository",
    "TenantMembershipRepository",
    # Tokens and migrations
    "AccessTokenRepository",
    "RoleMigrationBackupRepository",
]
