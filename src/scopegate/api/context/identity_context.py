"""Acting identity context management using contextvars.

Populated by the identity dependency for HTTP requests. Library callers
outside HTTP (workers, scripts) use `acting_as` to bind an identity for a
block of work. Access predicates read it through AccessPolicy.for_current_identity.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from uuid import UUID

# Context variable for the acting identity
_identity_context: ContextVar["IdentityContext | None"] = ContextVar(
    "identity_context", default=None
)


@dataclass(frozen=True)
class IdentityContext:
    """Immutable context for the identity performing the current operation.

    Attributes:
        identity_id: The acting identity
        email: Email claim from the identity token, if present
    """

    identity_id: UUID
    email: str | None = None


def set_identity_context(identity_id: UUID, email: str | None = None) -> None:
    """Set the acting identity for the current request."""
    _identity_context.set(IdentityContext(identity_id=identity_id, email=email))


def get_identity_context() -> IdentityContext | None:
    """Get the acting identity context, or None when nobody is authenticated."""
    return _identity_context.get()


def get_current_identity_id() -> UUID | None:
    ctx = _identity_context.get()
    return ctx.identity_id if ctx else None


def clear_identity_context() -> None:
    """Clear the acting identity context."""
    _identity_context.set(None)


@contextmanager
def acting_as(identity_id: UUID, email: str | None = None) -> Iterator[IdentityContext]:
    """Bind an acting identity for the duration of a block."""
    ctx = IdentityContext(identity_id=identity_id, email=email)
    token = _identity_context.set(ctx)
    try:
        yield ctx
    finally:
        _identity_context.reset(token)
