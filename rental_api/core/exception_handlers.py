"""Global exception handlers for consistent error responses.

Design:
- RateLimitExceeded → 429 with Retry-After and X-RateLimit-* headers
- AppError subclasses → 400 Bad Request
- Request validation errors → 400 with the first error message
- Unexpected Exception → generic 500 (safety net)
- Error bodies include request_id for distributed tracing
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rental_api.core.errors import AppError, ErrorDetails, RateLimitExceeded
from rental_api.core.logging import get_request_id
from rental_api.core.rate_limit import rate_limit_response

logger = logging.getLogger(__name__)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Render a rejected rate limit check as the standard 429 response."""

    return rate_limit_response(exc.result, now_ms=exc.now_ms)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Domain errors (ValidationAppError and any other AppError) are client
    faults and map to 400 Bad Request.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = 400

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report invalid request bodies as 400 with the first problem found."""

    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    details: ErrorDetails = {"field": field} if field else {}

    logger.info(
        "request_validation_failed",
        extra={
            "request_path": request.url.path,
            "error_count": len(errors),
            "field": field,
        },
    )

    return JSONResponse(
        status_code=400,
        content={
            "error": {
                "code": "validation_error",
                "message": first.get("msg", "Invalid request"),
                "request_id": get_request_id(),
                "details": details,
            }
        },
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs detailed information for debugging while returning a generic
    message. No stack traces reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(RateLimitExceeded)(rate_limit_exceeded_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(validation_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
