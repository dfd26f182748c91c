"""Access tokens - account-less, engagement-scoped authority for external parties."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from src.scopegate.models.base import utc_now
from src.scopegate.models.enums import AccessTokenStatus, EngagementRole


class AccessToken(SQLModel, table=True):
    """Secret-bearing credential scoped to one engagement and one permission set.

    Only the SHA256 hash of the secret is stored.
    """

    __tablename__ = "access_tokens"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    engagement_id: UUID = Field(foreign_key="engagements.id", index=True, ondelete="CASCADE")
    email: str = Field(max_length=255, index=True)
    token_hash: str = Field(max_length=255, unique=True, index=True)
    role: str = Field(default=EngagementRole.CLIENT_STAKEHOLDER.value, max_length=50)
    permissions: dict[str, bool] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )
    status: str = Field(default=AccessTokenStatus.PENDING.value, max_length=20, index=True)
    expires_at: datetime
    issued_by: UUID | None = Field(default=None, foreign_key="identities.id")
    created_at: datetime = Field(default_factory=utc_now)
    accepted_at: datetime | None = Field(default=None)
    accepted_by: UUID | None = Field(default=None, foreign_key="identities.id")
    revoked_at: datetime | None = Field(default=None)
    revoked_by: UUID | None = Field(default=None, foreign_key="identities.id")
    revoke_reason: str | None = Field(default=None, max_length=500)
    last_accessed_at: datetime | None = Field(default=None)
    access_count: int = Field(default=0)

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.expires_at <= (now or utc_now())

    def grants(self, permission: str) -> bool:
        return self.permissions.get(permission) is True
