"""Narrow tenant roles to v2

Revision ID: 004
Revises: 003
Create Date: 2026-02-02 00:10:00.000000

Tenant roles v2: {admin, member}.
"""

from collections.abc import Sequence

from src.alembic.migration_utils import replace_role_check

revision: str = "004"
down_revision: str | None = "003"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    replace_role_check("tenant_memberships", "ck_tenant_memberships_role", ["admin", "member"])


def downgrade() -> None:
    replace_role_check(
        "tenant_memberships", "ck_tenant_memberships_role", ["owner", "admin", "member"]
    )
