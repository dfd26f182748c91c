"""External-party portal endpoints.

Validation is account-less: the secret alone is presented. Acceptance needs
an authenticated identity, which becomes a member of the engagement.
"""

from fastapi import APIRouter, HTTPException, status

from src.scopegate.api.dependencies import AccessTokenServiceDep, CurrentIdentity
from src.scopegate.schemas import (
    PortalAcceptResponse,
    PortalTokenRequest,
    PortalValidateResponse,
)

router = APIRouter(prefix="/portal", tags=["portal"])


@router.post(
    "/validate",
    response_model=PortalValidateResponse,
    summary="Validate access token",
    description="Check a token and return what it grants. No authentication required.",
)
async def validate_token(
    request: PortalTokenRequest,
    token_service: AccessTokenServiceDep,
) -> PortalValidateResponse:
    grant = await token_service.validate(request.token)
    if grant is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Invalid or expired access token",
        )
    return PortalValidateResponse(
        engagement_id=grant.engagement_id,
        email=grant.email,
        role=grant.role,
        permissions=sorted(grant.permissions),
        expires_at=grant.expires_at,
    )


@router.post(
    "/accept",
    response_model=PortalAcceptResponse,
    summary="Accept access token",
    description="Consume a token and join its engagement as the authenticated identity.",
)
async def accept_token(
    request: PortalTokenRequest,
    identity: CurrentIdentity,
    token_service: AccessTokenServiceDep,
) -> PortalAcceptResponse:
    result = await token_service.consume(request.token, identity.id)
    return PortalAcceptResponse(
        engagement_id=result.token.engagement_id,
        tenant_id=result.tenant_id,
        role=result.token.role,
        already_accepted=result.already_accepted,
    )
