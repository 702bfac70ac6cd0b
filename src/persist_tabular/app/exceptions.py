"""
Application Exceptions
======================

Maps internal exceptions to HTTP status codes.
"""

import logging

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse


logger = logging.getLogger(__name__)


# =============================================================================
# EXCEPTION MAPPING
# =============================================================================

# Maps exception class names to (status_code, user_message)
EXCEPTION_MAP = {
    # Request / option validation
    "InvalidNamespaceError": (422, "Parent namespace is not a valid UUID."),
    "InvalidColumnNameError": (422, "A column name contains a delimiter or quote."),
    "ValidationError": (422, "Writer options are invalid."),

    # Row serialization
    "CellSerializationError": (422, "A row value could not be serialized."),

    # Output sink
    "TabularIoError": (500, "Failed to write the tabular file."),
    "WriterClosedError": (500, "Writer was used after being closed."),
    "ExportValidationError": (500, "Exported file failed validation."),
}


def get_http_exception(exc: Exception) -> HTTPException:
    """
    Convert an internal exception to an HTTPException.

    Args:
        exc: The caught exception.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    exc_name = type(exc).__name__

    if exc_name in EXCEPTION_MAP:
        status_code, user_message = EXCEPTION_MAP[exc_name]
    else:
        # Fallback for unknown exceptions
        logger.exception("Unmapped exception while handling request")
        status_code, user_message = 500, "Internal system error."

    return HTTPException(
        status_code=status_code,
        detail={
            "status": "error",
            "message": user_message,
            "detail": str(exc)
        }
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Global exception handler for FastAPI.

    Catches all unhandled exceptions and returns structured error response.
    """
    exc_name = type(exc).__name__

    if exc_name in EXCEPTION_MAP:
        status_code, user_message = EXCEPTION_MAP[exc_name]
    else:
        logger.error("Unhandled %s on %s: %s", exc_name, request.url.path, exc)
        status_code = 500
        user_message = "Internal system error."

    return JSONResponse(
        status_code=status_code,
        content={
            "status": "error",
            "message": user_message,
            "detail": str(exc)
        }
    )
