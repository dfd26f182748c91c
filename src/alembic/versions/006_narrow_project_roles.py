"""Narrow project roles to v2

Revision ID: 006
Revises: 005
Create Date: 2026-03-09 00:10:00.000000

Project roles v2 retire 'admin'.
"""

from collections.abc import Sequence

from src.alembic.migration_utils import replace_role_check

revision: str = "006"
down_revision: str | None = "005"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

PROJECT_ROLES_V2 = [
    "supplier_manager",
    "supplier_finance",
    "customer_manager",
    "customer_finance",
    "contributor",
    "viewer",
]


def upgrade() -> None:
    replace_role_check("project_memberships", "ck_project_memberships_role", PROJECT_ROLES_V2)


def downgrade() -> None:
    replace_role_check(
        "project_memberships", "ck_project_memberships_role", ["admin", *PROJECT_ROLES_V2]
    )
