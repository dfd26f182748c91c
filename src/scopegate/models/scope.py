"""Leaf-scope containers: projects and evaluation engagements."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.scopegate.models.base import utc_now


class Project(SQLModel, table=True):
    """Delivery project owned by one tenant.

    tenant_id is nullable while legacy rows are backfilled; a project without
    a tenant is reachable by super-admins only.
    """

    __tablename__ = "projects"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID | None = Field(
        default=None, foreign_key="tenants.id", index=True, ondelete="CASCADE"
    )
    name: str = Field(max_length=200, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)


class Engagement(SQLModel, table=True):
    """Evaluation engagement owned by one tenant."""

    __tablename__ = "engagements"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    tenant_id: UUID | None = Field(
        default=None, foreign_key="tenants.id", index=True, ondelete="CASCADE"
    )
    name: str = Field(max_length=200, index=True)
    created_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)
