"""Role-taxonomy reclassification with backup and restore.

Reclassification runs in the middle of a widen -> migrate -> narrow sequence:
the allowed-value constraint is widened to accept both old and new values, rows
holding the old value are copied to role_migration_backups and rewritten, and
only then is the constraint narrowed to the new taxonomy.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.scopegate.authz import effective_role, validate_role
from src.scopegate.core.exceptions import NotFoundError
from src.scopegate.core.logging import get_logger
from src.scopegate.models import (
    EngagementMembership,
    ProjectMembership,
    RoleMigrationBackup,
    ScopeKind,
    TenantMembership,
)
from src.scopegate.repositories import RoleMigrationBackupRepository

logger = get_logger(__name__)

# kind -> (membership table, scope column name)
_MEMBERSHIP_TABLES: dict[ScopeKind, tuple[Any, str]] = {
    ScopeKind.TENANT: (TenantMembership, "tenant_id"),
    ScopeKind.PROJECT: (ProjectMembership, "project_id"),
    ScopeKind.ENGAGEMENT: (EngagementMembership, "engagement_id"),
}


@dataclass(frozen=True)
class RoleReclassification:
    """Rewrite every `old_role` row of a scope kind to `new_role`."""

    migration_id: str
    kind: ScopeKind
    old_role: str
    new_role: str


@dataclass(frozen=True)
class ReclassificationResult:
    migration_id: str
    kind: ScopeKind
    old_role: str
    new_role: str
    count: int
    dry_run: bool = False


class RoleMigrationService:
    """Reclassify stored role values and restore them from backup."""

    def __init__(self, backup_repo: RoleMigrationBackupRepository, session: AsyncSession):
        self.backup_repo = backup_repo
        self.session = session

    @classmethod
    def from_session(cls, session: AsyncSession) -> "RoleMigrationService":
        return cls(RoleMigrationBackupRepository(session), session)

    async def reclassify(
        self, change: RoleReclassification, dry_run: bool = False
    ) -> ReclassificationResult:
        """Back up and rewrite every membership holding the old role value.

        The target role must belong to the current taxonomy.

        Raises:
            InvalidRoleError: If new_role is not a current role
        """
        validate_role(change.kind, change.new_role)
        table, scope_column = _MEMBERSHIP_TABLES[change.kind]
        scope_attr = getattr(table, scope_column)

        try:
            result = await self.session.execute(
                select(table.identity_id, scope_attr).where(table.role == change.old_role)
            )
            rows = result.all()

            if not dry_run and rows:
                for identity_id, scope_id in rows:
                    self.backup_repo.add(
                        RoleMigrationBackup(
                            migration_id=change.migration_id,
                            scope_kind=change.kind.value,
                            identity_id=identity_id,
                            scope_id=scope_id,
                            old_role=change.old_role,
                            new_role=change.new_role,
                        )
                    )
                await self.session.execute(
                    update(table)
                    .where(table.role == change.old_role)
                    .values(role=change.new_role)
                )
                await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Roles reclassified" if not dry_run else "Role reclassification dry run",
            migration_id=change.migration_id,
            scope_kind=change.kind.value,
            old_role=change.old_role,
            new_role=change.new_role,
            count=len(rows),
        )
        return ReclassificationResult(
            migration_id=change.migration_id,
            kind=change.kind,
            old_role=change.old_role,
            new_role=change.new_role,
            count=len(rows),
            dry_run=dry_run,
        )

    async def restore(self, migration_id: str) -> int:
        """Put back the roles a reclassification rewrote.

        Only rows still holding the value the migration wrote are restored, so a
        role changed by an administrator since then is left alone. Backups for
        the migration are removed once applied.

        Returns:
            Number of memberships restored
        """
        try:
            backups = await self.backup_repo.list_by_migration(migration_id)
            if not backups:
                raise NotFoundError(f"No backups recorded for migration '{migration_id}'")

            restored = 0
            for backup in backups:
                table, scope_column = _MEMBERSHIP_TABLES[ScopeKind(backup.scope_kind)]
                result = await self.session.execute(
                    update(table)
                    .where(
                        table.identity_id == backup.identity_id,
                        getattr(table, scope_column) == backup.scope_id,
                        table.role == backup.new_role,
                    )
                    .values(role=backup.old_role)
                )
                restored += result.rowcount or 0

            await self.backup_repo.delete_by_migration(migration_id)
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Role reclassification restored", migration_id=migration_id, count=restored)
        return restored

    async def snapshot(self, kind: ScopeKind) -> dict[tuple[UUID, UUID], str | None]:
        """Effective role of every membership of a kind, keyed by (identity, scope).

        Two snapshots taken around a reclassification are equal when the
        migration preserved every identity's authority.
        """
        table, scope_column = _MEMBERSHIP_TABLES[kind]
        result = await self.session.execute(
            select(table.identity_id, getattr(table, scope_column), table.role)
        )
        snapshot: dict[tuple[UUID, UUID], str | None] = {}
        for identity_id, scope_id, role in result.all():
            effective = effective_role(kind, role)
            snapshot[(identity_id, scope_id)] = effective.value if effective else None
        return snapshot
