"""Membership schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.scopegate.models import ScopeKind


class MembershipAssignRequest(BaseModel):
    """Grant a membership, or change the role of an existing one."""

    role: str = Field(min_length=1, max_length=50)


class MembershipRead(BaseModel):
    scope_kind: ScopeKind
    scope_id: UUID
    identity_id: UUID
    role: str
    is_active: bool = True
    is_default: bool = False
    created_at: datetime
