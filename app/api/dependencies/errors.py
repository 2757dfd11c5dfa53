"""Map domain exceptions to HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from infrastructure.exceptions import AggregateNotFound, AuthError, PermissionDenied
from infrastructure.logging import get_module_logger

logger = get_module_logger()


async def auth_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("request_unauthorized", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=401,
        content={"detail": str(exc)},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def permission_denied_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.info("request_forbidden", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=403, content={"detail": str(exc)})


async def not_found_handler(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


async def value_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(PermissionDenied, permission_denied_handler)
    app.add_exception_handler(AggregateNotFound, not_found_handler)
    app.add_exception_handler(ValueError, value_error_handler)
