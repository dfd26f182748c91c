"""Root test fixtures shared across all test types.

This conftest contains fixtures that can be used by both unit and integration tests.
Database-specific fixtures are in tests/integration/conftest.py.
"""

import os

# Set environment before any application imports
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-identity-tokens-0123456789")

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import Generator

import pytest

from src.scopegate.api.context import clear_identity_context
from src.scopegate.core.config import get_settings

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture(autouse=True)
def _reset_identity_context() -> Generator[None]:
    """Leave no acting identity behind between tests."""
    clear_identity_context()
    yield
    clear_identity_context()
