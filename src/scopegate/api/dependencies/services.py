"""Service factory dependencies."""

from typing import Annotated

from fastapi import Depends

from src.scopegate.api.dependencies.db import DBSession
from src.scopegate.services import AccessTokenService, MembershipService, TenantService


def get_membership_service(session: DBSession) -> MembershipService:
    return MembershipService.from_session(session)


def get_access_token_service(session: DBSession) -> AccessTokenService:
    return AccessTokenService.from_session(session)


def get_tenant_service(session: DBSession) -> TenantService:
    return TenantService.from_session(session)


MembershipServiceDep = Annotated[MembershipService, Depends(get_membership_service)]
AccessTokenServiceDep = Annotated[AccessTokenService, Depends(get_access_token_service)]
TenantServiceDep = Annotated[TenantService, Depends(get_tenant_service)]
