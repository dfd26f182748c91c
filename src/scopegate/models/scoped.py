"""Base for leaf records owned by a project or engagement.

Every scoped record stores its root scope directly (scope_kind, scope_id).
Nested children copy it from their parent when created or moved, so access
checks never walk join chains.
"""

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel

from src.scopegate.models.base import utc_now


class ScopedRecord(SQLModel):
    """Mixin for business tables gated by the scope predicates."""

    scope_kind: str = Field(max_length=20, index=True)
    scope_id: UUID = Field(index=True)
    created_by: UUID | None = Field(default=None)
    status: str = Field(default="draft", max_length=50)
    created_at: datetime = Field(default_factory=utc_now)
