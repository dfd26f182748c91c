"""Cryptographic utilities - identity JWTs and access-token secrets."""

import secrets
from datetime import UTC, datetime, timedelta
from hashlib import sha256
from typing import Any
from uuid import UUID

from jose import JWTError, jwt

from src.scopegate.core.config import get_settings

# 32 random bytes, hex encoded (64 chars) - fits the access_tokens.token_hash lookup
ACCESS_SECRET_BYTES = 32


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def generate_access_secret() -> str:
    """Generate a cryptographically secure access-token secret."""
    return secrets.token_hex(ACCESS_SECRET_BYTES)


def create_identity_token(
    subject: str | UUID,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT naming the acting identity.

    Production tokens come from the identity provider; this mirrors its claim
    layout for local tooling and tests.
    """
    settings = get_settings()
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=30))

    to_encode = {
        "sub": str(subject),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate JWT token. Returns None on any error."""
    settings = get_settings()
    try:
        return jwt.decode(  # type: ignore[no-any-return]
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None
