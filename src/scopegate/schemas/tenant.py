from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.scopegate.core.security.validators import (
    MAX_TENANT_SLUG_LENGTH,
    validate_tenant_slug_format,
)


class TenantCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    slug: str = Field(
        min_length=1,
        max_length=MAX_TENANT_SLUG_LENGTH,
        json_schema_extra={
            "examples": ["acme", "acme-corp", "acme_corp"],
            "description": "Lowercase alphanumeric, single hyphens or underscores as separators.",
        },
    )
    admin_identity_id: UUID = Field(description="Identity that becomes the first tenant-admin")
    features: dict[str, Any] = Field(default_factory=dict)

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        return validate_tenant_slug_format(v)


class TenantRead(BaseModel):
    id: UUID
    name: str
    slug: str
    is_active: bool
    features: dict[str, Any]
    created_at: datetime
    deleted_at: datetime | None = None

    model_config = {"from_attributes": True}


class TenantDeleteResponse(BaseModel):
    """Rows removed by a cascading tenant deletion, per table."""

    tenant_id: UUID
    deleted: dict[str, int]


class ScopeCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class ScopeRead(BaseModel):
    id: UUID
    tenant_id: UUID | None
    name: str
    created_at: datetime

    model_config = {"from_attributes": True}
