"""Tenant model - top-level isolation boundary."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from src.scopegate.core.security.validators import MAX_TENANT_SLUG_LENGTH
from src.scopegate.models.base import utc_now


class Tenant(SQLModel, table=True):
    """Tenant registry. Owns projects and engagements."""

    __tablename__ = "tenants"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100, index=True)
    slug: str = Field(max_length=MAX_TENANT_SLUG_LENGTH, unique=True, index=True)
    is_active: bool = Field(default=True)
    features: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(default_factory=utc_now)
    deleted_at: datetime | None = Field(default=None)

    @property
    def is_deleted(self) -> bool:
        """Check if tenant is soft-deleted."""
        return self.deleted_at is not None
