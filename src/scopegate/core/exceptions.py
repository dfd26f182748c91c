"""Domain errors and exception handlers with request_id in responses.

Authorization predicates never raise; a denied check surfaces as
PermissionDeniedError (403) only where an attachment point turns the boolean
into a refusal. Write-boundary rejections (duplicate grant, out-of-taxonomy
role, unusable token) are RejectedWriteError subclasses, kept apart from
denials so callers can tell "not allowed" from "not possible".
"""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.scopegate.core.logging import get_logger

logger = get_logger(__name__)


class PermissionDeniedError(Exception):
    """Acting identity may not perform the operation on the target scope."""


class RejectedWriteError(ValueError):
    """A membership or token write was refused by a data-integrity rule."""

    status_code = 409


class MembershipConflictError(RejectedWriteError):
    """A membership already exists (active or deactivated) for the pair."""


class InvalidRoleError(RejectedWriteError):
    """Role value is not part of the current taxonomy for its scope kind."""

    status_code = 422


class TokenError(RejectedWriteError):
    """Access token is unknown, expired, revoked, or already used."""

    status_code = 400


class NotFoundError(RejectedWriteError):
    """Target scope, membership or token does not exist."""

    status_code = 404


def _error_response(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": detail,
            "request_id": correlation_id.get(),
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, exc.detail)

    @app.exception_handler(PermissionDeniedError)
    async def permission_denied_handler(
        request: Request, exc: PermissionDeniedError
    ) -> JSONResponse:
        return _error_response(403, str(exc) or "Not permitted")

    @app.exception_handler(RejectedWriteError)
    async def rejected_write_handler(request: Request, exc: RejectedWriteError) -> JSONResponse:
        logger.info(
            "Write rejected",
            error_type=type(exc).__name__,
            detail=str(exc),
            path=request.url.path,
        )
        return _error_response(exc.status_code, str(exc))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
