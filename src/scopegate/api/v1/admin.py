"""Admin API endpoints (superuser only)."""

from uuid import UUID

from fastapi import APIRouter, status

from src.scopegate.api.dependencies import SuperIdentity, TenantServiceDep
from src.scopegate.schemas import TenantCreate, TenantDeleteResponse, TenantRead

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post(
    "/tenants",
    response_model=TenantRead,
    status_code=status.HTTP_201_CREATED,
    summary="Bootstrap tenant",
    description="Create a tenant and its first tenant-admin. Requires superuser privileges.",
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Not authorized (superuser required)"},
        409: {"description": "Slug already taken"},
    },
)
async def bootstrap_tenant(
    request: TenantCreate,
    _identity: SuperIdentity,
    tenant_service: TenantServiceDep,
) -> TenantRead:
    tenant = await tenant_service.bootstrap_tenant(
        request.name, request.slug, request.admin_identity_id, request.features
    )
    return TenantRead.model_validate(tenant)


@router.delete(
    "/tenants/{tenant_id}",
    response_model=TenantRead,
    summary="Soft-delete tenant",
    description="Mark the tenant deleted. Its scopes stop being accessible to everyone.",
)
async def soft_delete_tenant(
    tenant_id: UUID,
    _identity: SuperIdentity,
    tenant_service: TenantServiceDep,
) -> TenantRead:
    tenant = await tenant_service.soft_delete_tenant(tenant_id)
    return TenantRead.model_validate(tenant)


@router.delete(
    "/tenants/{tenant_id}/purge",
    response_model=TenantDeleteResponse,
    summary="Delete tenant permanently",
    description="Remove the tenant with its scopes, memberships and access tokens "
    "in one transaction.",
)
async def purge_tenant(
    tenant_id: UUID,
    _identity: SuperIdentity,
    tenant_service: TenantServiceDep,
) -> TenantDeleteResponse:
    counts = await tenant_service.delete_tenant_cascade(tenant_id)
    return TenantDeleteResponse(tenant_id=tenant_id, deleted=counts)
