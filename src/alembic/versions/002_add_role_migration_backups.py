"""Add role migration backups

Revision ID: 002
Revises: 001
Create Date: 2026-01-19 00:00:00.000000

Audit copy of every membership row a role reclassification rewrites.
"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op

revision: str = "002"
down_revision: str | None = "001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "role_migration_backups",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("migration_id", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column("scope_kind", sqlmodel.sql.sqltypes.AutoString(length=20), nullable=False),
        sa.Column("identity_id", sa.Uuid(), nullable=False),
        sa.Column("scope_id", sa.Uuid(), nullable=False),
        sa.Column("old_role", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("new_role", sqlmodel.sql.sqltypes.AutoString(length=50), nullable=False),
        sa.Column("migrated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_role_migration_backups_migration_id",
        "role_migration_backups",
        ["migration_id"],
        unique=False,
    )
    op.create_index(
        "ix_role_migration_backups_identity_id",
        "role_migration_backups",
        ["identity_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_role_migration_backups_identity_id", table_name="role_migration_backups")
    op.drop_index("ix_role_migration_backups_migration_id", table_name="role_migration_backups")
    op.drop_table("role_migration_backups")
