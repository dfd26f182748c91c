"""Membership store - (identity, scope, role) associations at each level.

Composite primary keys enforce one row per (identity, scope). Role columns
are plain strings; the allowed-value check happens at the write boundary and
in the database CHECK constraints added by migrations.
"""

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

from src.scopegate.models.base import utc_now
from src.scopegate.models.enums import EngagementRole, ProjectRole, TenantRole


class TenantMembership(SQLModel, table=True):
    """Identity membership in a tenant. Removal deactivates the row."""

    __tablename__ = "tenant_memberships"

    identity_id: UUID = Field(foreign_key="identities.id", primary_key=True)
    tenant_id: UUID = Field(foreign_key="tenants.id", primary_key=True, ondelete="CASCADE")
    role: str = Field(default=TenantRole.MEMBER.value, max_length=50)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)


class ProjectMembership(SQLModel, table=True):
    """Identity membership in a project."""

    __tablename__ = "project_memberships"

    identity_id: UUID = Field(foreign_key="identities.id", primary_key=True)
    project_id: UUID = Field(foreign_key="projects.id", primary_key=True, ondelete="CASCADE")
    role: str = Field(default=ProjectRole.VIEWER.value, max_length=50)
    created_at: datetime = Field(default_factory=utc_now)


class EngagementMembership(SQLModel, table=True):
    """Identity membership in an evaluation engagement."""

    __tablename__ = "engagement_memberships"

    identity_id: UUID = Field(foreign_key="identities.id", primary_key=True)
    engagement_id: UUID = Field(
        foreign_key="engagements.id", primary_key=True, ondelete="CASCADE"
    )
    role: str = Field(default=EngagementRole.PARTICIPANT.value, max_length=50)
    is_default: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now)
