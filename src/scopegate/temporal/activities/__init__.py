"""
Temporal Activities - Fine-grained, idempotent operations.

Activities should be:
1. Idempotent - Safe to retry
2. Fine-grained - Do one thing well
3. Side-effect aware - External calls go here, not in workflows
"""

from src.scopegate.temporal.activities.tokens import (
    cleanup_access_tokens,
    expire_stale_access_tokens,
)

__all__ = [
    "cleanup_access_tokens",
    "expire_stale_access_tokens",
]
