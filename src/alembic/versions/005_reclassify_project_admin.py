"""Reclassify project admin as supplier_manager

Revision ID: 005
Revises: 004
Create Date: 2026-03-09 00:00:00.000000

The v1 project constraint already allows both values, so it serves as the
widened set. Rows are backed up before being rewritten.
"""

from collections.abc import Sequence

from src.alembic.migration_utils import reclassify_roles, restore_roles

revision: str = "005"
down_revision: str | None = "004"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

MIGRATION_ID = "005_project_admin_to_supplier_manager"


def upgrade() -> None:
    reclassify_roles(
        migration_id=MIGRATION_ID,
        table="project_memberships",
        scope_column="project_id",
        scope_kind="project",
        old_role="admin",
        new_role="supplier_manager",
    )


def downgrade() -> None:
    restore_roles(
        migration_id=MIGRATION_ID, table="project_memberships", scope_column="project_id"
    )
