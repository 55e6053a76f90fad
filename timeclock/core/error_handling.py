"""
Standardized error handling utilities for API endpoints.
"""
from functools import wraps
from typing import Callable, Any
from uuid import UUID
from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging

from timeclock.core.exceptions import AppError, ValidationError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred while processing your request. Please try again later."


def parse_uuid(uuid_string: str, entity_name: str = "ID") -> UUID:
    """
    Parse a UUID string and raise a standardized error if invalid.

    Args:
        uuid_string: String to parse as UUID
        entity_name: Name of the entity (for error message)

    Returns:
        Parsed UUID

    Raises:
        ValidationError: If UUID is invalid
    """
    try:
        return UUID(uuid_string)
    except ValueError:
        raise ValidationError(
            f"Invalid {entity_name.lower()}: '{uuid_string}'. Must be a valid UUID."
        )


def handle_endpoint_errors(
    operation_name: str = None,
    log_error: bool = True,
):
    """
    Decorator to standardize error handling across all endpoints.

    Domain errors and HTTPExceptions pass through unchanged, ValueErrors become
    validation errors, and anything else is logged and surfaced as an opaque 500.

    Usage:
        @handle_endpoint_errors(operation_name="create_shift")
        async def create_shift_endpoint(...):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            op_name = operation_name or func.__name__
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except ValueError as e:
                if log_error:
                    logger.warning(f"Value error in {op_name}: {str(e)}")
                raise ValidationError(f"Invalid input: {str(e)}")
            except Exception as e:
                if log_error:
                    logger.error(
                        f"Unexpected error in {op_name}",
                        exc_info=True,
                        extra={
                            "operation": op_name,
                            "error": str(e),
                            "error_type": type(e).__name__,
                        }
                    )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=INTERNAL_ERROR_MESSAGE,
                )
        return wrapper
    return decorator


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error with its stable kind."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind},
        headers=getattr(exc, "headers", None),
    )


def kind_for_status(status_code: int) -> str:
    """Nearest error kind for a bare HTTP status (routing, method, framework errors)."""
    if status_code >= 500:
        return "internal"
    if status_code == status.HTTP_404_NOT_FOUND:
        return "not_found"
    if status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN):
        return "unauthorized"
    if status_code == status.HTTP_409_CONFLICT:
        return "conflict"
    return "validation"


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = kind_for_status(exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "kind": kind},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception in {request.method} {request.url.path}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_MESSAGE, "kind": "internal"},
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return detailed validation errors to help users fix their input."""
    errors = []
    for error in exc.errors():
        field = " -> ".join(str(loc) for loc in error["loc"])
        field = field.replace("body -> ", "").replace("query -> ", "").replace("path -> ", "")
        message = error["msg"]
        error_type = error["type"]

        # Provide more user-friendly messages
        if error_type == "missing":
            message = f"{field} is required"

        errors.append({
            "field": field,
            "message": message,
            "type": error_type,
        })

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": "Validation error",
            "kind": "validation",
            "errors": errors,
            "message": "Please check your input and try again.",
        }
    )
