"""Helpers for role-taxonomy migrations.

A taxonomy change runs in three revisions: widen the CHECK constraint so old
and new values are both allowed, reclassify rows (backing each one up first),
then narrow the constraint to the new set. Downgrades run the same steps in
reverse, restoring roles from the backup table.
"""

from collections.abc import Iterable

import sqlalchemy as sa

from alembic import op
from src.scopegate.core.logging import get_logger

logger = get_logger(__name__)


def role_check_sql(values: Iterable[str]) -> str:
    quoted = ", ".join(f"'{value}'" for value in sorted(values))
    return f"role IN ({quoted})"


def replace_role_check(table: str, constraint: str, values: Iterable[str]) -> None:
    """Swap the allowed-role CHECK constraint on a membership table."""
    op.drop_constraint(constraint, table, type_="check")
    op.create_check_constraint(constraint, table, role_check_sql(values))


def reclassify_roles(
    *,
    migration_id: str,
    table: str,
    scope_column: str,
    scope_kind: str,
    old_role: str,
    new_role: str,
) -> int:
    """Back up then rewrite every row holding old_role. Returns rows changed."""
    bind = op.get_bind()
    bind.execute(
        sa.text(
            f"""
            INSERT INTO role_migration_backups
                (id, migration_id, scope_kind, identity_id, scope_id,
                 old_role, new_role, migrated_at)
            SELECT gen_random_uuid(), :migration_id, :scope_kind, identity_id,
                   {scope_column}, role, :new_role, timezone('utc', now())
            FROM {table}
            WHERE role = :old_role
            """
        ),
        {
            "migration_id": migration_id,
            "scope_kind": scope_kind,
            "old_role": old_role,
            "new_role": new_role,
        },
    )
    result = bind.execute(
        sa.text(f"UPDATE {table} SET role = :new_role WHERE role = :old_role"),
        {"old_role": old_role, "new_role": new_role},
    )
    count = result.rowcount or 0
    logger.info(
        "Roles reclassified",
        migration_id=migration_id,
        table=table,
        old_role=old_role,
        new_role=new_role,
        count=count,
    )
    return count


def restore_roles(*, migration_id: str, table: str, scope_column: str) -> int:
    """Restore roles rewritten by migration_id, then drop its backups."""
    bind = op.get_bind()
    result = bind.execute(
        sa.text(
            f"""
            UPDATE {table} AS m
            SET role = b.old_role
            FROM role_migration_backups AS b
            WHERE b.migration_id = :migration_id
              AND m.identity_id = b.identity_id
              AND m.{scope_column} = b.scope_id
              AND m.role = b.new_role
            """
        ),
        {"migration_id": migration_id},
    )
    bind.execute(
        sa.text("DELETE FROM role_migration_backups WHERE migration_id = :migration_id"),
        {"migration_id": migration_id},
    )
    count = result.rowcount or 0
    logger.info("Roles restored", migration_id=migration_id, table=table, count=count)
    return count
