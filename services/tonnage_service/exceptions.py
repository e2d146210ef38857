"""
Centralized exception handlers for the tonnage service.
"""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tonnage_common.audit_logger import get_service_logger
from tonnage_service.errors import ValidationError
from tonnage_service.schemas import FIELD_MESSAGES

log = get_service_logger("tonnage")


def _details(exc: RequestValidationError) -> list[str]:
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"]]
        field = loc[-1] if loc else ""
        if loc and loc[0] == "body" and field in FIELD_MESSAGES:
            message = FIELD_MESSAGES[field]
        else:
            name = ".".join(loc[1:]) or (loc[0] if loc else "request")
            message = f"{name}: {error['msg']}"
        if message not in details:
            details.append(message)
    return details


def _validation_response(details: list[str]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Validation failed", "details": details},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Request schema failures (body, path and query) answer 400 with one
    human-readable message per offending field.
    """
    details = _details(exc)
    log.warning(
        f"Validation error on {request.url.path}: {len(details)} error(s)",
        extra={"endpoint": request.url.path},
    )
    return _validation_response(details)


async def range_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    log.warning(
        f"Validation error on {request.url.path}: {len(exc.details)} error(s)",
        extra={"endpoint": request.url.path},
    )
    return _validation_response(exc.details)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        content = {"error": "Route not found"}
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.error(
        f"Unhandled error on {request.url.path}: {exc}",
        exc_info=exc,
        extra={"endpoint": request.url.path},
    )
    config = getattr(request.app.state, "config", None)
    development = config is not None and config.server.is_development
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Internal server error",
            "message": str(exc) if development else "Something went wrong",
        },
    )
