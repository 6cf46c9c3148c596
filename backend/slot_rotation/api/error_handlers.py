"""Error Handlers: map exceptions to the {success: false, error, errorCode} envelope.

Invariants:
    - RotationError -> its own HTTP status and to_response() payload
    - RequestValidationError -> 400 with field-level details
    - Exception (catch-all) -> 500, never leaks internal details
    - A partially committed rotation is logged at CRITICAL with its batch context
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from slot_rotation.core.errors import ErrorSeverity, RotationError, StoreError

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    ErrorSeverity.INFO: logging.INFO,
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.CRITICAL: logging.CRITICAL,
}


def _envelope(message: str, code: str, category: str, **extra) -> dict:
    return {
        "success": False,
        "error": message,
        "errorCode": code,
        "category": category,
        **extra,
    }


async def rotation_error_handler(request: Request, exc: RotationError):
    extra = {"error_code": exc.code, "path": request.url.path}
    if isinstance(exc, StoreError) and exc.is_partial_commit:
        extra.update(run_id=exc.context.run_id, batch_index=exc.batch_index)
        logger.critical(
            f"Partial rotation: {exc.committed_count} records in "
            f"{exc.committed_batches} batches committed before failure",
            extra=extra,
        )
    else:
        logger.log(_LOG_LEVELS[exc.severity], f"{exc.code}: {exc.message}", extra=extra)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    details = [
        {
            "field": ".".join(str(loc) for loc in e["loc"]),
            "message": e["msg"],
            "type": e["type"],
        }
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_envelope(
            "Invalid request data", "VALIDATION_ERROR", "validation",
            severity=ErrorSeverity.ERROR.value, details=details,
        ),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}", exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_envelope(
            "An unexpected error occurred", "INTERNAL_ERROR", "internal",
            severity=ErrorSeverity.CRITICAL.value,
        ),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    app.add_exception_handler(RotationError, rotation_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
