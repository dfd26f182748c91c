"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import IdentityFactory, TenantFactory, ...
"""

from tests.factories.base import BaseFactory, generate_uuid, utc_now
from tests.factories.identity import IdentityFactory
from tests.factories.membership import (
    EngagementMembershipFactory,
    ProjectMembershipFactory,
    TenantMembershipFactory,
)
from tests.factories.tenant import EngagementFactory, ProjectFactory, TenantFactory
from tests.factories.token import AccessTokenFactory

__all__ = [
    # Base
    "BaseFactory",
    "generate_uuid",
    "utc_now",
    # Registry
    "IdentityFactory",
    "TenantFactory",
    "ProjectFactory",
    "EngagementFactory",
    # Memberships
    "TenantMembershipFactory",
    "ProjectMembershipFactory",
    "EngagementMembershipFactory",
    # Tokens
    "AccessTokenFactory",
]
