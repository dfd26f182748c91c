"""Engagement access token endpoints (issuer side)."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from src.scopegate.api.dependencies import (
    AccessTokenServiceDep,
    CurrentIdentity,
    require_scope_roles,
)
from src.scopegate.authz import ScopeRef
from src.scopegate.models import EngagementRole, ScopeKind
from src.scopegate.schemas import (
    AccessTokenIssueRequest,
    AccessTokenIssueResponse,
    AccessTokenRead,
    AccessTokenRevokeRequest,
)

router = APIRouter(prefix="/engagements/{scope_id}/access-tokens", tags=["access-tokens"])

# Issuing and revoking tokens is open to engagement admins and evaluators
TOKEN_ISSUER_ROLES = frozenset({EngagementRole.ADMIN.value, EngagementRole.EVALUATOR.value})

IssuerScope = Annotated[
    ScopeRef, Depends(require_scope_roles(ScopeKind.ENGAGEMENT, TOKEN_ISSUER_ROLES))
]


@router.post(
    "",
    response_model=AccessTokenIssueResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue access token",
    description="Issue a time-boxed token for an external party. The secret is shown once.",
)
async def issue_access_token(
    request: AccessTokenIssueRequest,
    scope: IssuerScope,
    identity: CurrentIdentity,
    token_service: AccessTokenServiceDep,
) -> AccessTokenIssueResponse:
    token, secret = await token_service.issue(
        engagement_id=scope.id,
        email=request.email,
        issued_by=identity.id,
        permissions=request.permissions,
        role=request.role.value,
        expires_in_days=request.expires_in_days,
    )
    return AccessTokenIssueResponse(
        id=token.id,
        engagement_id=token.engagement_id,
        email=token.email,
        role=token.role,
        permissions=token.permissions,
        expires_at=token.expires_at,
        token=secret,
    )


@router.post(
    "/{token_id}/revoke",
    response_model=AccessTokenRead,
    summary="Revoke access token",
)
async def revoke_access_token(
    token_id: UUID,
    scope: IssuerScope,
    identity: CurrentIdentity,
    token_service: AccessTokenServiceDep,
    request: AccessTokenRevokeRequest | None = None,
) -> AccessTokenRead:
    token = await token_service.get_token(token_id)
    if token is None or token.engagement_id != scope.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Access token not found",
        )
    token = await token_service.revoke(
        token_id, revoked_by=identity.id, reason=request.reason if request else None
    )
    return AccessTokenRead.model_validate(token)
