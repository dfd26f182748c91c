"""Access-check schemas."""

from uuid import UUID

from pydantic import BaseModel

from src.scopegate.models import ScopeKind


class ScopeAccessResponse(BaseModel):
    """Predicate outcomes for the caller on one scope."""

    scope_kind: ScopeKind
    scope_id: UUID
    can_access: bool
    can_write: bool
    role: str | None = None


class AccessibleScopesResponse(BaseModel):
    scope_kind: ScopeKind
    scope_ids: list[UUID]
