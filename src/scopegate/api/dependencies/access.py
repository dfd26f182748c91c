"""Attach access predicates to routes.

`require_scope_access` and `require_scope_roles` build dependencies that
resolve the scope named by the path, evaluate a predicate for the acting
identity, and raise 403 when it is False. The resolved ScopeRef is returned
to the endpoint.
"""

from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.scopegate.api.dependencies.db import DBSession
from src.scopegate.api.dependencies.identity import CurrentIdentity
from src.scopegate.authz import AccessPolicy, MembershipLookups, ScopeRef
from src.scopegate.models import ScopeKind


async def get_access_policy(session: DBSession, identity: CurrentIdentity) -> AccessPolicy:
    """AccessPolicy bound to the authenticated identity for this request."""
    return AccessPolicy(MembershipLookups(session), identity.id)


Policy = Annotated[AccessPolicy, Depends(get_access_policy)]


def _resolve_scope(request: Request, kind: ScopeKind | None, id_param: str) -> ScopeRef:
    raw_kind = kind if kind is not None else request.path_params.get("kind")
    scope = ScopeRef.of(raw_kind, request.path_params.get(id_param, ""))
    if scope is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Scope not found",
        )
    return scope


def require_scope_access(
    kind: ScopeKind | None = None, id_param: str = "scope_id"
) -> Callable[..., Awaitable[ScopeRef]]:
    """Dependency gating a route with can_access on the path scope.

    With kind=None the scope kind is read from a `{kind}` path parameter.
    """

    async def dependency(request: Request, policy: Policy) -> ScopeRef:
        scope = _resolve_scope(request, kind, id_param)
        if not await policy.can_access(scope):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not permitted to access this scope",
            )
        return scope

    return dependency


def require_scope_roles(
    kind: ScopeKind | None = None,
    roles: Iterable[str | Enum] | None = None,
    id_param: str = "scope_id",
) -> Callable[..., Awaitable[ScopeRef]]:
    """Dependency gating a route with can_write(scope, roles) on the path scope.

    roles=None uses the default write roles of the scope kind.
    """
    allowed = frozenset(r.value if isinstance(r, Enum) else r for r in roles) if roles else None

    async def dependency(request: Request, policy: Policy) -> ScopeRef:
        scope = _resolve_scope(request, kind, id_param)
        if not await policy.can_write(scope, allowed):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not permitted to modify this scope",
            )
        return scope

    return dependency
