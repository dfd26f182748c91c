"""Reclassify tenant owner as admin

Revision ID: 003
Revises: 002
Create Date: 2026-02-02 00:00:00.000000

The v1 constraint already allows both 'owner' and 'admin', so it serves as
the widened set. Rows are backed up before being rewritten.
"""

from collections.abc import Sequence

from src.alembic.migration_utils import reclassify_roles, restore_roles

revision: str = "003"
down_revision: str | None = "002"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MIGRATION_ID = "003_tenant_owner_to_admin"


def upgrade() -> None:
    reclassify_roles(
        migration_id=MIGRATION_ID,
        table="tenant_memberships",
        scope_column="tenant_id",
        scope_kind="tenant",
        old_role="owner",
        new_role="admin",
    )


def downgrade() -> None:
    restore_roles(migration_id=MIGRATION_ID, table="tenant_memberships", scope_column="tenant_id")
