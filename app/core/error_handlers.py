"""
Exception handlers rendering every failure as {ok: false, message, error_type, detail?}
"""

from typing import Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import ServiceError, create_error_response

logger = structlog.get_logger()


def _error_body(message: str, error_type: str, detail: Optional[str] = None) -> dict:
    body = {"ok": False, "message": message, "error_type": error_type}
    if detail:
        body["detail"] = detail
    return body


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Domain errors carry their own status code"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Request failed",
        error_type=exc.__class__.__name__,
        message=exc.message,
        detail=exc.detail,
        status_code=exc.status_code,
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(status_code=exc.status_code, content=create_error_response(exc))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same body shape"""
    not_found = exc.status_code == status.HTTP_404_NOT_FOUND
    logger.warning("HTTP error", status_code=exc.status_code, path=request.url.path, method=request.method)

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            str(exc.detail),
            "NotFound" if not_found else "HTTPException",
            request.url.path if not_found else None,
        ),
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Missing or malformed body, query or path fields are a 400"""
    problems = [
        f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.warning("Request validation failed", problems=problems, path=request.url.path, method=request.method)

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Validation error occurred", "ValidationError", "; ".join(problems)),
    )


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        "Document store failure",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Database operation failed", "UpstreamError", exc.__class__.__name__),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
        path=request.url.path,
        method=request.method,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Server error", "InternalServerError", str(exc)),
    )


def register_error_handlers(app) -> None:
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, general_exception_handler)
