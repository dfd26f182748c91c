from src.scopegate.schemas.access import AccessibleScopesResponse, ScopeAccessResponse
from src.scopegate.schemas.membership import MembershipAssignRequest, MembershipRead
from src.scopegate.schemas.pagination import PaginatedResponse
from src.scopegate.schemas.tenant import (
    ScopeCreate,
    ScopeRead,
    TenantCreate,
    TenantDeleteResponse,
    TenantRead,
)
from src.scopegate.schemas.token import (
    AccessTokenIssueRequest,
    AccessTokenIssueResponse,
    AccessTokenRead,
    AccessTokenRevokeRequest,
    PortalAcceptResponse,
    PortalTokenRequest,
    PortalValidateResponse,
)

__all__ = [
    "AccessTokenIssueRequest",
    "AccessTokenIssueResponse",
    "AccessTokenRead",
    "AccessTokenRevokeRequest",
    "AccessibleScopesResponse",
    "MembershipAssignRequest",
    "MembershipRead",
    "PaginatedResponse",
    "PortalAcceptResponse",
    "PortalTokenRequest",
    "PortalValidateResponse",
    "ScopeAccessResponse",
    "ScopeCreate",
    "ScopeRead",
    "TenantCreate",
    "TenantDeleteResponse",
    "TenantRead",
]
