"""Scope membership endpoints."""

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from src.scopegate.api.dependencies import (
    CurrentIdentity,
    MembershipServiceDep,
    Policy,
    require_scope_access,
    require_scope_roles,
)
from src.scopegate.authz import ScopeRef
from src.scopegate.models import ScopeKind
from src.scopegate.schemas import MembershipAssignRequest, MembershipRead, PaginatedResponse

router = APIRouter(tags=["memberships"])

WritableScope = Annotated[ScopeRef, Depends(require_scope_roles())]
AccessibleEngagement = Annotated[
    ScopeRef, Depends(require_scope_access(ScopeKind.ENGAGEMENT))
]


def _to_read(scope: ScopeRef, membership: Any) -> MembershipRead:
    return MembershipRead(
        scope_kind=scope.kind,
        scope_id=scope.id,
        identity_id=membership.identity_id,
        role=membership.role,
        is_active=getattr(membership, "is_active", True),
        is_default=getattr(membership, "is_default", False),
        created_at=membership.created_at,
    )


@router.get(
    "/scopes/{kind}/{scope_id}/members",
    response_model=PaginatedResponse[MembershipRead],
    summary="List scope members",
    description="Members of a scope. The caller must be able to access the scope.",
)
async def list_members(
    kind: ScopeKind,
    scope_id: UUID,
    policy: Policy,
    membership_service: MembershipServiceDep,
    cursor: str | None = None,
    limit: int = 50,
) -> PaginatedResponse[MembershipRead]:
    scope = ScopeRef(kind, scope_id)
    items, next_cursor, has_more = await membership_service.list_members(
        policy, scope, cursor, min(max(limit, 1), 200)
    )
    return PaginatedResponse(
        items=[_to_read(scope, m) for m in items],
        next_cursor=next_cursor,
        has_more=has_more,
    )


@router.put(
    "/scopes/{kind}/{scope_id}/members/{identity_id}",
    response_model=MembershipRead,
    summary="Grant or change membership",
    description="Grant a membership, or change the role of an existing one. "
    "Requires the scope's default write role.",
)
async def assign_member(
    identity_id: UUID,
    request: MembershipAssignRequest,
    scope: WritableScope,
    membership_service: MembershipServiceDep,
) -> MembershipRead:
    membership = await membership_service.assign(scope, identity_id, request.role)
    return _to_read(scope, membership)


@router.delete(
    "/scopes/{kind}/{scope_id}/members/{identity_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Revoke membership",
)
async def revoke_member(
    identity_id: UUID,
    scope: WritableScope,
    membership_service: MembershipServiceDep,
) -> None:
    await membership_service.revoke(scope, identity_id)


@router.post(
    "/scopes/{kind}/{scope_id}/members/{identity_id}/reactivate",
    response_model=MembershipRead,
    summary="Reactivate tenant membership",
    description="Reactivate a deactivated tenant membership. Tenant scopes only.",
)
async def reactivate_member(
    identity_id: UUID,
    scope: WritableScope,
    membership_service: MembershipServiceDep,
    request: MembershipAssignRequest | None = None,
) -> MembershipRead:
    if scope.kind != ScopeKind.TENANT:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only tenant memberships can be reactivated",
        )
    membership = await membership_service.reactivate_tenant_membership(
        identity_id, scope.id, request.role if request else None
    )
    return _to_read(scope, membership)


@router.post(
    "/engagements/{scope_id}/default",
    response_model=MembershipRead,
    summary="Set default engagement",
    description="Make this engagement the caller's default.",
)
async def set_default_engagement(
    scope: AccessibleEngagement,
    identity: CurrentIdentity,
    membership_service: MembershipServiceDep,
) -> MembershipRead:
    membership = await membership_service.set_default_engagement(identity.id, scope.id)
    return _to_read(scope, membership)
