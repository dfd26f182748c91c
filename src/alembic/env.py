import os
from logging.config import fileConfig

from sqlalchemy import pool
from sqlmodel import SQLModel

from alembic import context
from src.scopegate.core.db.engine import sync_database_url

# Import all models for metadata
from src.scopegate.models import (  # noqa: F401
    AccessToken,
    Engagement,
    EngagementMembership,
    Identity,
    Project,
    ProjectMembership,
    RoleMigrationBackup,
    Tenant,
    TenantMembership,
)

config = context.config

if config.config_file_name is not None and os.path.exists(config.config_file_name):
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode."""
    context.configure(
        url=sync_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode with sync engine."""
    from sqlalchemy import create_engine

    connectable = create_engine(sync_database_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )
        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
