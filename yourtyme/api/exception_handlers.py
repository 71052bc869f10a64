"""
Exception handlers for the YourTyme FastAPI application.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from yourtyme.core.exceptions import (
    YourTymeException,
    error_payload,
    get_exception_status_code,
)
from yourtyme.core.logging import get_logger, log_error

logger = get_logger(__name__)


def setup_exception_handlers(app: FastAPI) -> None:
    """Register the YourTyme exception handlers on the app."""

    @app.exception_handler(YourTymeException)
    async def yourtyme_exception_handler(
        request: Request, exc: YourTymeException
    ) -> JSONResponse:
        """Map application exceptions to their HTTP status and JSON body."""
        status_code = get_exception_status_code(exc)
        if status_code >= 500:
            log_error(exc, {"path": request.url.path, "error_code": exc.error_code})
        else:
            logger.warning(
                "Request failed",
                path=request.url.path,
                error_code=exc.error_code,
                message=exc.message,
            )
        return JSONResponse(status_code=status_code, content=error_payload(exc))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        log_error(exc, {"path": request.url.path})
        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal server error",
                "error_code": "INTERNAL_ERROR",
                "details": {},
            },
        )
