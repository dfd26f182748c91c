"""Project and engagement creation inside a tenant."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from src.scopegate.api.dependencies import TenantServiceDep, require_scope_roles
from src.scopegate.authz import ScopeRef
from src.scopegate.models import ScopeKind
from src.scopegate.schemas import ScopeCreate, ScopeRead

router = APIRouter(prefix="/tenants/{scope_id}", tags=["scopes"])

# Default tenant write roles: tenant-admins only
TenantAdminScope = Annotated[ScopeRef, Depends(require_scope_roles(ScopeKind.TENANT))]


@router.post(
    "/projects",
    response_model=ScopeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create project",
)
async def create_project(
    request: ScopeCreate,
    scope: TenantAdminScope,
    tenant_service: TenantServiceDep,
) -> ScopeRead:
    project = await tenant_service.create_project(scope.id, request.name)
    return ScopeRead.model_validate(project)


@router.post(
    "/engagements",
    response_model=ScopeRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create engagement",
)
async def create_engagement(
    request: ScopeCreate,
    scope: TenantAdminScope,
    tenant_service: TenantServiceDep,
) -> ScopeRead:
    engagement = await tenant_service.create_engagement(scope.id, request.name)
    return ScopeRead.model_validate(engagement)
