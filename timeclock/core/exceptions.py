"""
Failure taxonomy shared by every service.

Each kind is an HTTPException so FastAPI renders it directly, and carries a
stable ``kind`` tag that the global handler includes in the response body.
"""
from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class for expected, locally classified failures."""
    kind = "internal"
    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int = None):
        super().__init__(status_code=status_code or self.default_status, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(AppError):
    """Malformed or out-of-policy input."""
    kind = "validation"
    default_status = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(AppError):
    """Missing or invalid credential, inactive account, or insufficient role."""
    kind = "unauthorized"
    default_status = status.HTTP_401_UNAUTHORIZED


class NotFoundError(AppError):
    """Referenced entity absent."""
    kind = "not_found"
    default_status = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """State already satisfies a uniqueness invariant."""
    kind = "conflict"
    default_status = status.HTTP_409_CONFLICT
