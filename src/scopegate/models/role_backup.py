"""Audit copy of membership rows changed by a role-taxonomy reclassification."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from src.scopegate.models.base import utc_now


class RoleMigrationBackup(SQLModel, table=True):
    """One row per membership whose role a reclassification rewrote."""

    __tablename__ = "role_migration_backups"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    migration_id: str = Field(max_length=100, index=True)
    scope_kind: str = Field(max_length=20)
    identity_id: UUID = Field(index=True)
    scope_id: UUID
    old_role: str = Field(max_length=50)
    new_role: str = Field(max_length=50)
    migrated_at: datetime = Field(default_factory=utc_now)
