"""Identity dependencies - resolve the acting identity from a bearer token."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status

from src.scopegate.api.context import set_identity_context
from src.scopegate.api.dependencies.db import DBSession
from src.scopegate.core.logging import bind_identity_context
from src.scopegate.core.security import decode_token
from src.scopegate.models import Identity
from src.scopegate.repositories import IdentityRepository


async def get_current_identity(
    session: DBSession,
    authorization: Annotated[str | None, Header()] = None,
) -> Identity:
    """Validate the identity token and bind the acting identity.

    The token is issued by the external identity provider; `sub` carries the
    identity id.
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
        )

    payload = decode_token(authorization[7:])
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
        )

    try:
        identity_id = UUID(str(payload.get("sub")))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        ) from e

    identity = await IdentityRepository(session).get_by_id(identity_id)
    if identity is None or not identity.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Identity not found or inactive",
        )

    set_identity_context(identity.id, identity.email)
    bind_identity_context(identity.id, identity.email)
    return identity


async def require_superuser(
    identity: Annotated[Identity, Depends(get_current_identity)],
) -> Identity:
    """Require the global super-admin flag."""
    if not identity.is_superuser:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Superuser access required",
        )
    return identity


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]
SuperIdentity = Annotated[Identity, Depends(require_superuser)]
