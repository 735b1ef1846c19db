"""
mutamba_erp.api.errors

Maps package errors onto HTTP responses.

Every error body has the shape `{"error": {"kind": ..., "message": ...}}`.
`internal` responses never include the underlying cause; it is logged instead.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from mutamba_erp.errors import (
    AlreadyExists,
    AuthFailed,
    ConfigurationMissing,
    DirectoryUnavailable,
    FunctionError,
    Internal,
    InvalidArgument,
    PermissionDenied,
    Unauthenticated,
)
from mutamba_erp.observability.logging import get_logger

log = get_logger(__name__)

_STATUS: dict[type[FunctionError], int] = {
    Unauthenticated: HTTP_401_UNAUTHORIZED,
    PermissionDenied: HTTP_403_FORBIDDEN,
    InvalidArgument: HTTP_400_BAD_REQUEST,
    AlreadyExists: HTTP_409_CONFLICT,
    Internal: HTTP_500_INTERNAL_SERVER_ERROR,
}


async def _function_error(_: Request, exc: FunctionError) -> JSONResponse:
    if isinstance(exc, Internal):
        log.error("function_internal_error", message=exc.message, cause=repr(exc.cause))
    status = _STATUS.get(type(exc), HTTP_500_INTERNAL_SERVER_ERROR)
    return JSONResponse(status_code=status, content={"error": exc.to_dict()})


async def _auth_failed(_: Request, exc: AuthFailed) -> JSONResponse:
    return JSONResponse(
        status_code=HTTP_401_UNAUTHORIZED,
        content={"error": {"kind": Unauthenticated.kind, "message": exc.message}},
    )


async def _configuration_missing(_: Request, exc: ConfigurationMissing) -> JSONResponse:
    log.error("backend_unconfigured", setting=exc.setting)
    return JSONResponse(
        status_code=HTTP_503_SERVICE_UNAVAILABLE,
        content={"error": {"kind": exc.kind, "message": exc.message}},
    )


async def _directory_unavailable(_: Request, exc: DirectoryUnavailable) -> JSONResponse:
    log.error("directory_unavailable", message=exc.message)
    return JSONResponse(
        status_code=HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "error": {"kind": Internal.kind, "message": "Diretório de usuários indisponível."}
        },
    )


async def _request_validation(request: Request, exc: RequestValidationError) -> Response:
    # Callable functions answer with the function error shape; other routes keep
    # the framework default.
    if not request.url.path.startswith("/v1/functions/"):
        return await request_validation_exception_handler(request, exc)
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={"error": InvalidArgument("Requisição inválida.").to_dict()},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FunctionError, _function_error)  # type: ignore[arg-type]
    app.add_exception_handler(AuthFailed, _auth_failed)  # type: ignore[arg-type]
    app.add_exception_handler(ConfigurationMissing, _configuration_missing)  # type: ignore[arg-type]
    app.add_exception_handler(DirectoryUnavailable, _directory_unavailable)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _request_validation)  # type: ignore[arg-type]
