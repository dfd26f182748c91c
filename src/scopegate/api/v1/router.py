from fastapi import APIRouter

from src.scopegate.api.v1 import access, admin, members, portal, scopes, tokens

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(access.router)
api_router.include_router(members.router)
api_router.include_router(scopes.router)
api_router.include_router(tokens.router)
api_router.include_router(portal.router)
api_router.include_router(admin.router)
