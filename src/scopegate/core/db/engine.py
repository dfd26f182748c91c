"""Database engine management."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from src.scopegate.core.config import get_settings

_engine: AsyncEngine | None = None


def _get_engine_kwargs(url: str) -> dict[str, Any]:
    """Pool arguments for the configured backend (SQLite has no sized pool)."""
    if url.startswith("sqlite"):
        return {}
    settings = get_settings()
    return {
        "pool_size": settings.database_pool_size,
        "max_overflow": settings.database_max_overflow,
        "pool_pre_ping": True,
    }


def get_engine() -> AsyncEngine:
    """Get or create the database engine singleton."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.database_url,
            **_get_engine_kwargs(settings.database_url),
        )
    return _engine


async def dispose_engine() -> None:
    """Dispose the database engine. Call during shutdown."""
    global _engine
    if _engine is not None:
        await _engine.dispose()
        _engine = None


def sync_database_url() -> str:
    """Database URL with the async driver stripped, for Alembic (asyncpg -> psycopg2)."""
    return get_settings().database_url.replace("+asyncpg", "").replace("+aiosqlite", "")
