"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-01-12 00:00:00.000000

Tenants, leaf scopes and memberships under the v1 role taxonomy.
"""

from collections.abc import Sequence

import sqlalchemy as sa
import sqlmodel

from alembic import op
from src.alembic.migration_utils import role_check_sql
from src.scopegate.core.security.validators import MAX_TENANT_SLUG_LENGTH

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

TENANT_ROLES_V1 = ["owner", "admin", "member"]
PROJECT_ROLES_V1 = [
    "admin",
    "supplier_manager",
    "supplier_finance",
    "customer_manager",
    "customer_finance",
    "contributor",
    "viewer",
]
ENGAGEMENT_ROLES_V1 = ["admin", "evaluator", "client_stakeholder", "participant", "vendor_portal"]


def _leaf_scope_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=True),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=200), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(f"ix_{name}_tenant_id", name, ["tenant_id"], unique=False)
    op.create_index(f"ix_{name}_name", name, ["name"], unique=False)


def upgrade() -> None:
    # 1. Identities (provisioned by the identity provider)
    op.create_table(
        "identities",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_superuser", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_identities_email", "identities", ["email"], unique=True)

    # 2. Tenants
    op.create_table(
        "tenants",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column(
            "slug",
            sqlmodel.sql.sqltypes.AutoString(length=MAX_TENANT_SLUG_LENGTH),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("features", sa.JSON(), nullable=False, server_default=sa.text("'{}'")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tenants_name", "tenants", ["name"], unique=False)
    op.create_index("ix_tenants_slug", "tenants", ["slug"], unique=True)

    # 3. Tenant memberships
    op.create_table(
        "tenant_memberships",
        sa.Column("identity_id", sa.Uuid(), nullable=False),
        sa.Column("tenant_id", sa.Uuid(), nullable=False),
        sa.Column(
            "role",
            sqlmodel.sql.sqltypes.AutoString(length=50),
            nullable=False,
            server_default="member",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["identity_id"], ["identities.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["tenant_id"], ["tenants.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("identity_id", "tenant_id"),
        sa.CheckConstraint(role_check_sql(TENANT_ROLES_V1), name="ck_tenant_memberships_role"),
    )
    op.create_index(
        "ix_tenant_memberships_tenant_id", "tenant_memberships", ["tenant_id"], unique=False
    )

    # 4. Leaf scopes
    _leaf_scope_table("projects")
    _leaf_scope_table("engagements")

    # 5. Leaf memberships
    op.create_table(
        "project_memberships",
        sa.Column("identity_id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column(
            "role",
            sqlmodel.sql.sqltypes.AutoString(length=50),
            nullable=False,
            server_default="viewer",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["identity_id"], ["identities.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("identity_id", "project_id"),
        sa.CheckConstraint(role_check_sql(PROJECT_ROLES_V1), name="ck_project_memberships_role"),
    )
    op.create_index(
        "ix_project_memberships_project_id", "project_memberships", ["project_id"], unique=False
    )

    op.create_table(
        "engagement_memberships",
        sa.Column("identity_id", sa.Uuid(), nullable=False),
        sa.Column("engagement_id", sa.Uuid(), nullable=False),
        sa.Column(
            "role",
            sqlmodel.sql.sqltypes.AutoString(length=50),
            nullable=False,
            server_default="participant",
        ),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["identity_id"], ["identities.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["engagement_id"], ["engagements.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("identity_id", "engagement_id"),
        sa.CheckConstraint(
            role_check_sql(ENGAGEMENT_ROLES_V1), name="ck_engagement_memberships_role"
        ),
    )
    op.create_index(
        "ix_engagement_memberships_engagement_id",
        "engagement_memberships",
        ["engagement_id"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_engagement_memberships_engagement_id", table_name="engagement_memberships")
    op.drop_table("engagement_memberships")
    op.drop_index("ix_project_memberships_project_id", table_name="project_memberships")
    op.drop_table("project_memberships")

    for name in ("engagements", "projects"):
        op.drop_index(f"ix_{name}_name", table_name=name)
        op.drop_index(f"ix_{name}_tenant_id", table_name=name)
        op.drop_table(name)

    op.drop_index("ix_tenant_memberships_tenant_id", table_name="tenant_memberships")
    op.drop_table("tenant_memberships")

    op.drop_index("ix_tenants_slug", table_name="tenants")
    op.drop_index("ix_tenants_name", table_name="tenants")
    op.drop_table("tenants")

    op.drop_index("ix_identities_email", table_name="identities")
    op.drop_table("identities")
