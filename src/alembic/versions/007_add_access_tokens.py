"""Add engagement access tokens and default engagement

Revision ID: 007
Revises: 006
Create Date: 2026-04-20 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op

revision: str = "007"
down_revision: str | None = "006"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.add_column(
        "engagement_memberships",
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    # At most one default engagement per identity
    op.create_index(
        "uq_engagement_memberships_default",
        "engagement_memberships",
        ["identity_id"],
        unique=True,
        postgresql_where=sa.text("is_default"),
    )

    op.create_table(
        "access_tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("engagement_id", sa.Uuid(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("token_hash", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column(
            "role",
            sqlmodel.sql.sqltypes.AutoString(length=50),
            nullable=False,
            server_default="client_stakeholder",
        ),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column(
            "status",
            sqlmodel.sql.sqltypes.AutoString(length=20),
            nullable=False,
            server_default="pending",
        ),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("issued_by", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("accepted_at", sa.DateTime(), nullable=True),
        sa.Column("accepted_by", sa.Uuid(), nullable=True),
        sa.Column("revoked_at", sa.DateTime(), nullable=True),
        sa.Column("revoked_by", sa.Uuid(), nullable=True),
        sa.Column("revoke_reason", sqlmodel.sql.sqltypes.AutoString(length=500), nullable=True),
        sa.Column("last_accessed_at", sa.DateTime(), nullable=True),
        sa.Column("access_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.ForeignKeyConstraint(["engagement_id"], ["engagements.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["issued_by"], ["identities.id"]),
        sa.ForeignKeyConstraint(["accepted_by"], ["identities.id"]),
        sa.ForeignKeyConstraint(["revoked_by"], ["identities.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'expired', 'revoked')",
            name="ck_access_tokens_status",
        ),
    )
    op.create_index("ix_access_tokens_token_hash", "access_tokens", ["token_hash"], unique=True)
    op.create_index("ix_access_tokens_engagement_id", "access_tokens", ["engagement_id"])
    op.create_index("ix_access_tokens_email", "access_tokens", ["email"])
    op.create_index("ix_access_tokens_status", "access_tokens", ["status"])
    # One pending token per (engagement, email)
    op.create_index(
        "uq_access_tokens_pending_email",
        "access_tokens",
        ["engagement_id", "email"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    op.drop_index("uq_access_tokens_pending_email", table_name="access_tokens")
    op.drop_index("ix_access_tokens_status", table_name="access_tokens")
    op.drop_index("ix_access_tokens_email", table_name="access_tokens")
    op.drop_index("ix_access_tokens_engagement_id", table_name="access_tokens")
    op.drop_index("ix_access_tokens_token_hash", table_name="access_tokens")
    op.drop_table("access_tokens")

    op.drop_index("uq_engagement_memberships_default", table_name="engagement_memberships")
    op.drop_column("engagement_memberships", "is_default")
