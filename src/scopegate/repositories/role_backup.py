"""Repository for role reclassification backups."""

from sqlalchemy import delete
from sqlmodel import select

from src.scopegate.models import RoleMigrationBackup
from src.scopegate.repositories.base import BaseRepository


class RoleMigrationBackupRepository(BaseRepository[RoleMigrationBackup]):
    model = RoleMigrationBackup

    async def list_by_migration(self, migration_id: str) -> list[RoleMigrationBackup]:
        result = await self.session.execute(
            select(RoleMigrationBackup).where(RoleMigrationBackup.migration_id == migration_id)
        )
        return list(result.scalars().all())

    async def delete_by_migration(self, migration_id: str) -> int:
        result = await self.session.execute(
            delete(RoleMigrationBackup).where(
                RoleMigrationBackup.migration_id == migration_id  # type: ignore[arg-type]
            )
        )
        return result.rowcount or 0  # type: ignore[attr-defined]
