"""Global exception handlers for the FastAPI application.

This module provides centralized exception handling for all API endpoints,
ensuring every error is rendered with the same envelope and that the message
shown to the client is also recorded on the request's audit trail.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import Response
from loguru import logger
from starlette.exceptions import HTTPException

from src.api.middleware.audit import record_error
from src.api.schemas.errors import ErrorResponse, ValidationErrorDetail
from src.api.utils.responses import ORJSONResponse
from src.core.context import RequestContext
from src.core.error_context import sanitize_error_context
from src.core.exceptions import (
    CreditosError,
    ErrorCode,
    InvalidArgumentError,
    NotFoundError,
    Severity,
)

VALIDATION_FAILED = "Validation Failed"
VALIDATION_FAILED_MESSAGE = "Erro de validação nos dados fornecidos"
INTERNAL_ERROR_MESSAGE = "Erro interno do servidor. Tente novamente mais tarde."


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    error: str | None = None,
    validation_errors: list[ValidationErrorDetail] | None = None,
) -> Response:
    record_error(message)
    body = ErrorResponse(
        status=status_code,
        error=error or _reason(status_code),
        message=message,
        path=request.url.path,
        validation_errors=validation_errors,
    )
    return ORJSONResponse(status_code=status_code, content=body.to_content())


async def creditos_error_handler(request: Request, exc: Exception) -> Response:
    """Handle CreditosError exceptions.

    ``InvalidArgumentError`` maps to 400 and ``NotFoundError`` to 404; any
    other subclass is treated as an internal error.

    Args:
        request: The FastAPI request that caused the exception
        exc: The CreditosError exception to handle

    Returns:
        Response: ORJSONResponse with error details

    Raises:
        TypeError: If exc is not a CreditosError instance
    """
    # Type narrowing - we know this handler only receives CreditosError
    if not isinstance(exc, CreditosError):
        raise TypeError(f"Expected CreditosError, got {type(exc).__name__}")

    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": request.url.path,
            "error_code": exc.error_code,
        },
    )

    if isinstance(exc, NotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, InvalidArgumentError):
        status_code = status.HTTP_400_BAD_REQUEST
    else:
        logger.error(
            "Unexpected {exception_type}: {message}",
            exception_type=type(exc).__name__,
            message=exc.message,
            correlation_id=RequestContext.get_correlation_id(),
            **error_context,
        )
        return _error_response(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE
        )

    log_level = "WARNING" if exc.severity is Severity.LOW else "ERROR"
    logger.log(
        log_level,
        "Handling {exception_type}: {message}",
        exception_type=type(exc).__name__,
        message=exc.message,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )
    return _error_response(request, status_code, exc.message)


async def validation_error_handler(request: Request, exc: Exception) -> Response:
    """Handle FastAPI RequestValidationError exceptions.

    Converts validation errors to the envelope with one ``validationErrors``
    entry per rejected field.

    Args:
        request: The FastAPI request that caused the exception
        exc: The RequestValidationError exception to handle

    Returns:
        Response: ORJSONResponse with validation error details

    Raises:
        TypeError: If exc is not a RequestValidationError instance
    """
    if not isinstance(exc, RequestValidationError):
        raise TypeError(f"Expected RequestValidationError, got {type(exc).__name__}")

    details = []
    for error in exc.errors():
        # Get the field path (e.g., ['query', 'limite'] -> 'limite')
        location = error.get("loc", ())
        field_name = ".".join(str(part) for part in location[1:]) or "root"
        details.append(
            ValidationErrorDetail(
                field=field_name,
                rejected_value=error.get("input"),
                message=error.get("msg", "Invalid value"),
            )
        )

    error_context = sanitize_error_context(
        exc,
        {
            "path": request.url.path,
            "method": request.method,
            "validation_errors": {d.field: d.message for d in details},
        },
    )
    logger.warning(
        "Request validation failed",
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    return _error_response(
        request,
        status.HTTP_400_BAD_REQUEST,
        VALIDATION_FAILED_MESSAGE,
        error=VALIDATION_FAILED,
        validation_errors=details,
    )


async def http_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle Starlette HTTPException (unknown routes, wrong methods).

    Raises:
        TypeError: If exc is not an HTTPException instance
    """
    if not isinstance(exc, HTTPException):
        raise TypeError(f"Expected HTTPException, got {type(exc).__name__}")

    logger.warning(
        "HTTP exception",
        correlation_id=RequestContext.get_correlation_id(),
        status=exc.status_code,
        method=request.method,
        path=request.url.path,
        detail=exc.detail,
    )

    response = _error_response(request, exc.status_code, str(exc.detail))
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def generic_exception_handler(request: Request, exc: Exception) -> Response:
    """Handle generic exceptions.

    The client only sees a generic message; the exception and its traceback
    are logged server side.

    Args:
        request: The FastAPI request that caused the exception
        exc: The unhandled exception

    Returns:
        Response: ORJSONResponse with generic error message
    """
    error_context = sanitize_error_context(
        exc,
        {
            "request_method": request.method,
            "request_path": request.url.path,
            "error_code": ErrorCode.INTERNAL_ERROR.value,
        },
    )

    # Log the full exception with stack trace and sanitized context
    logger.exception(
        "Unhandled exception: {exception_type}",
        exception_type=type(exc).__name__,
        correlation_id=RequestContext.get_correlation_id(),
        **error_context,
    )

    return _error_response(
        request, status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(CreditosError, creditos_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered")
