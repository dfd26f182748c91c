"""Security utilities - crypto and validators.

Re-exports all security-related functions for convenience.
"""

from src.scopegate.core.security.crypto import (
    create_identity_token,
    decode_token,
    generate_access_secret,
    hash_token,
)
from src.scopegate.core.security.validators import (
    MAX_TENANT_SLUG_LENGTH,
    validate_tenant_slug_format,
)

__all__ = [
    # Crypto
    "create_identity_token",
    "decode_token",
    "generate_access_secret",
    "hash_token",
    # Validators
    "MAX_TENANT_SLUG_LENGTH",
    "validate_tenant_slug_format",
]
