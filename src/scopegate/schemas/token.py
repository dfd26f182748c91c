"""Access token schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.scopegate.models import EngagementRole


class AccessTokenIssueRequest(BaseModel):
    """Request to issue an engagement access token."""

    email: EmailStr
    role: EngagementRole = EngagementRole.CLIENT_STAKEHOLDER
    permissions: dict[str, bool] | None = None
    expires_in_days: int | None = Field(default=None, ge=1, le=365)


class AccessTokenIssueResponse(BaseModel):
    """Issued token. `token` is the plaintext secret and is only shown once."""

    id: UUID
    engagement_id: UUID
    email: str
    role: str
    permissions: dict[str, bool]
    expires_at: datetime
    token: str


class AccessTokenRead(BaseModel):
    id: UUID
    engagement_id: UUID
    email: str
    role: str
    status: str
    permissions: dict[str, bool]
    expires_at: datetime
    created_at: datetime
    accepted_at: datetime | None = None
    revoked_at: datetime | None = None
    access_count: int = 0

    model_config = {"from_attributes": True}


class AccessTokenRevokeRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class PortalTokenRequest(BaseModel):
    """Secret presented by an external party."""

    token: str = Field(min_length=1, max_length=255)


class PortalValidateResponse(BaseModel):
    engagement_id: UUID
    email: str
    role: str
    permissions: list[str]
    expires_at: datetime


class PortalAcceptResponse(BaseModel):
    engagement_id: UUID
    tenant_id: UUID
    role: str
    already_accepted: bool
    message: str = "Access granted"
