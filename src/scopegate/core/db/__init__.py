"""Database utilities - engine, session."""

from src.scopegate.core.db.engine import dispose_engine, get_engine, sync_database_url
from src.scopegate.core.db.session import get_session

__all__ = [
    # Engine
    "dispose_engine",
    "get_engine",
    # Alembic
    "sync_database_url",
    # Session
    "get_session",
]
