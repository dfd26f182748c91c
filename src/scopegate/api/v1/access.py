"""Access-check endpoints for the acting identity."""

from uuid import UUID

from fastapi import APIRouter

from src.scopegate.api.dependencies import Policy
from src.scopegate.authz import ScopeRef
from src.scopegate.models import ScopeKind
from src.scopegate.schemas import AccessibleScopesResponse, ScopeAccessResponse

router = APIRouter(tags=["access"])


@router.get(
    "/me/scopes/{kind}",
    response_model=AccessibleScopesResponse,
    summary="List accessible scopes",
    description="Every scope of the given kind the caller can access.",
)
async def list_accessible_scopes(kind: ScopeKind, policy: Policy) -> AccessibleScopesResponse:
    scope_ids = await policy.accessible_scope_ids(kind)
    return AccessibleScopesResponse(scope_kind=kind, scope_ids=sorted(scope_ids, key=str))


@router.get(
    "/scopes/{kind}/{scope_id}/access",
    response_model=ScopeAccessResponse,
    summary="Check access to a scope",
    description="Evaluate can_access, can_write (default roles) and the caller's role.",
)
async def check_scope_access(
    kind: ScopeKind, scope_id: UUID, policy: Policy
) -> ScopeAccessResponse:
    scope = ScopeRef(kind, scope_id)
    role = await policy.role_in(scope)
    return ScopeAccessResponse(
        scope_kind=kind,
        scope_id=scope_id,
        can_access=await policy.can_access(scope),
        can_write=await policy.can_write(scope),
        role=role.value if role else None,
    )
