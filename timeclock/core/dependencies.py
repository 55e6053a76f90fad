from typing import Iterable
from uuid import UUID
from fastapi import Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.database import get_db
from timeclock.core.exceptions import UnauthorizedError
from timeclock.core.security import decode_token
from timeclock.models.user import User, UserRole, UserStatus, MANAGER_ROLES

security = HTTPBearer(auto_error=False)


def ensure_role(principal: User, allowed_roles: Iterable[UserRole]) -> User:
    """Capability check against the principal handed to an operation."""
    if principal is None or principal.role not in list(allowed_roles):
        raise UnauthorizedError("Insufficient permissions", status_code=status.HTTP_403_FORBIDDEN)
    return principal


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from JWT token."""
    if credentials is None or not credentials.credentials.strip():
        raise UnauthorizedError("Invalid authentication credentials: token is empty")

    payload = decode_token(credentials.credentials)

    if payload is None or payload.get("type") != "access":
        raise UnauthorizedError("Invalid authentication credentials")

    user_id = payload.get("sub")
    if user_id is None:
        raise UnauthorizedError("Invalid token payload")

    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        raise UnauthorizedError("Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()

    if user is None or user.status != UserStatus.ACTIVE:
        raise UnauthorizedError("User not found or inactive")

    return user


def require_role(allowed_roles: list[UserRole]):
    """Dependency factory for role-based access control."""
    async def role_checker(
        current_user: User = Depends(get_current_user),
    ) -> User:
        return ensure_role(current_user, allowed_roles)
    return role_checker


get_current_manager = require_role(MANAGER_ROLES)
get_current_admin = require_role([UserRole.ADMIN])
