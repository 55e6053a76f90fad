from typing import Optional, List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError
import logging

from timeclock.core.dependencies import ensure_role
from timeclock.core.exceptions import ConflictError, NotFoundError, ValidationError
from timeclock.core.security import get_pin_digest, normalize_email, validate_pin_strength
from timeclock.models.user import User, UserRole, UserStatus, MANAGER_ROLES
from timeclock.schemas.user import UserCreate, UserUpdate
from timeclock.services.time_calculations import utcnow

logger = logging.getLogger(__name__)


def validate_pin(pin: str) -> str:
    """Return the PIN if it is acceptable, else raise ValidationError."""
    is_valid, error = validate_pin_strength(pin)
    if not is_valid:
        raise ValidationError(error or "Invalid PIN")
    return pin


async def find_active_pin_holder(
    db: AsyncSession,
    pin_digest: str,
    exclude_user_id: Optional[UUID] = None,
) -> Optional[User]:
    query = select(User).where(
        and_(
            User.pin_digest == pin_digest,
            User.status == UserStatus.ACTIVE,
        )
    )
    if exclude_user_id:
        query = query.where(User.id != exclude_user_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def _commit_unique(db: AsyncSession, user: User, message: str) -> User:
    """Commit, translating a unique index violation (email or active PIN) into a conflict."""
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.warning(f"Unique constraint rejected write: {message}")
        raise ConflictError(message)
    await db.refresh(user)
    return user


async def get_me(db: AsyncSession, user: User) -> User:
    found = await db.get(User, user.id)
    if not found:
        raise NotFoundError("User not found")
    return found


async def list_users(
    db: AsyncSession,
    manager: User,
    role: Optional[UserRole] = None,
    status: Optional[UserStatus] = None,
) -> List[User]:
    ensure_role(manager, MANAGER_ROLES)

    query = select(User)
    if role:
        query = query.where(User.role == role)
    if status:
        query = query.where(User.status == status)
    result = await db.execute(query.order_by(User.last_name.asc(), User.first_name.asc()))
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    admin: User,
    data: UserCreate,
) -> User:
    """Create a user, optionally with a kiosk PIN."""
    ensure_role(admin, [UserRole.ADMIN])

    email = normalize_email(data.email)
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none():
        raise ValidationError("Email already in use")

    pin_digest = None
    if data.pin:
        pin_digest = get_pin_digest(validate_pin(data.pin))
        if await find_active_pin_holder(db, pin_digest):
            raise ValidationError("PIN already in use")

    user = User(
        email=email,
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        phone=data.phone or None,
        role=data.role,
        status=UserStatus.ACTIVE,
        pin_digest=pin_digest,
        pin_changed_at=utcnow() if pin_digest else None,
        hourly_rate=data.hourly_rate,
    )
    db.add(user)
    user = await _commit_unique(db, user, "Email or PIN already in use")

    logger.info(f"User {user.id} created by {admin.id}", extra={"user_id": str(user.id), "role": user.role.value})
    return user


async def update_user(
    db: AsyncSession,
    manager: User,
    user_id: UUID,
    data: UserUpdate,
) -> User:
    """
    Partial update of a user.

    ``pin=""`` clears the PIN. Reactivating a user whose PIN has since been
    taken by another active user is a conflict.
    """
    ensure_role(manager, MANAGER_ROLES)

    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    changes = data.model_dump(exclude_unset=True)

    pin_changed = "pin" in changes and changes["pin"] is not None
    if pin_changed:
        if changes["pin"] == "":
            new_digest = None
        else:
            new_digest = get_pin_digest(validate_pin(changes["pin"]))
            if await find_active_pin_holder(db, new_digest, exclude_user_id=user.id):
                raise ValidationError("PIN already in use")
    else:
        new_digest = user.pin_digest

    new_status = changes.get("status") or user.status
    reactivated = user.status != UserStatus.ACTIVE and new_status == UserStatus.ACTIVE
    if reactivated and new_digest and not pin_changed:
        if await find_active_pin_holder(db, new_digest, exclude_user_id=user.id):
            raise ConflictError("PIN already in use by another active user")

    for field in ("first_name", "last_name", "role", "hourly_rate"):
        if changes.get(field) is not None:
            setattr(user, field, changes[field])
    if "phone" in changes:
        user.phone = changes["phone"] or None
    user.status = new_status
    if pin_changed:
        user.pin_digest = new_digest
        user.pin_changed_at = utcnow() if new_digest else None

    user = await _commit_unique(db, user, "PIN already in use by another active user")
    logger.info(f"User {user.id} updated by {manager.id}", extra={"user_id": str(user.id), "fields": list(changes)})
    return user


async def update_my_pin(
    db: AsyncSession,
    user: User,
    new_pin: str,
) -> User:
    if not new_pin:
        raise ValidationError("New PIN is required")

    pin_digest = get_pin_digest(validate_pin(new_pin))
    if await find_active_pin_holder(db, pin_digest, exclude_user_id=user.id):
        raise ValidationError("This PIN is already in use by another employee")

    user.pin_digest = pin_digest
    user.pin_changed_at = utcnow()
    user = await _commit_unique(db, user, "This PIN is already in use by another employee")

    logger.info(f"User {user.id} changed their PIN")
    return user
