"""
Global Exception Handlers for the FauxDash API.

Unhandled exceptions are logged with an error id, the request context and a
full traceback, and answered with a generic 500 body that carries the id.
"""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from fauxdash.backup import InvalidBackupError
from fauxdash.core.logging_config import get_logger
from fauxdash.server.services.settings_service import UnknownSettingError

logger = get_logger(__name__)


async def domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Answer a rejected upload or settings payload with 400 and the error text.

    Args:
        request: The HTTP request that caused the exception
        exc: InvalidBackupError or UnknownSettingError

    Returns:
        JSONResponse with the error message as ``detail``
    """
    logger.info(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Log an unhandled exception and return a 500 response with an error id.

    Args:
        request: The HTTP request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with error details and error ID
    """
    error_id = id(exc)

    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else "unknown",
            "error_type": type(exc).__name__,
            "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "error_type": type(exc).__name__,
        },
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(InvalidBackupError, domain_error_handler)
    app.add_exception_handler(UnknownSettingError, domain_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("Exception handlers registered successfully")
