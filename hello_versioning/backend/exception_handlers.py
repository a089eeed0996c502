"""
Exception Handlers.

FastAPI exception handlers that convert application exceptions to JSON
error responses:

    {"error": {"code": "VERSION_NOT_FOUND", "message": "..."}}
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from hello_versioning.core.exceptions import (
    ApplicationError,
    DeclarationError,
    ExternalServiceError,
    VersionNotFoundError,
)
from hello_versioning.core.logging import get_logger

logger = get_logger(__name__)

# Map exception types to HTTP status codes
EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    VersionNotFoundError: 404,
    DeclarationError: 400,
    ExternalServiceError: 502,
}


def _status_for(exc: ApplicationError) -> int:
    for exc_type in type(exc).__mro__:
        if exc_type in EXCEPTION_STATUS_MAP:
            return EXCEPTION_STATUS_MAP[exc_type]
    return 500


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    """Render any ApplicationError with its mapped status code."""
    status_code = _status_for(exc)

    log_extra = {
        "code": exc.code,
        "message": exc.message,
        "status": status_code,
        "path": request.url.path,
        "method": request.method,
    }
    if status_code >= 500:
        logger.error("Server error", source="server", **log_extra)
    else:
        logger.warning("Client error", source="server", **log_extra)

    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers to ``app``."""
    app.add_exception_handler(ApplicationError, application_error_handler)
