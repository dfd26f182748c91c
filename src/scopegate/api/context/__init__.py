"""Request context management for API layer.

Provides context variables for tracking request-scoped state:
- IdentityContext: the acting identity consulted by access predicates
"""

from src.scopegate.api.context.identity_context import (
    IdentityContext,
    acting_as,
    clear_identity_context,
    get_current_identity_id,
    get_identity_context,
    set_identity_context,
)

__all__ = [
    "IdentityContext",
    "acting_as",
    "clear_identity_context",
    "get_current_identity_id",
    "get_identity_context",
    "set_identity_context",
]
