"""
Notification sink.

Records are persisted in their own commit after the state change that caused
them; a failure here is logged and never propagates to the caller.
"""
from typing import List
from uuid import UUID
import logging

from sqlalchemy import select, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.exceptions import NotFoundError
from timeclock.models.notification import Notification, NotificationType
from timeclock.models.user import User, UserStatus, MANAGER_ROLES

logger = logging.getLogger(__name__)


async def _persist(db: AsyncSession, notifications: List[Notification]) -> int:
    if not notifications:
        return 0
    try:
        db.add_all(notifications)
        await db.commit()
        return len(notifications)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            "Failed to persist notifications",
            exc_info=True,
            extra={"count": len(notifications), "error": str(e)},
        )
        return 0


async def notify(
    db: AsyncSession,
    user_id: UUID,
    type: NotificationType,
    message: str,
) -> int:
    """Create one notification for ``user_id``. Returns the number persisted."""
    return await _persist(db, [Notification(user_id=user_id, type=type, message=message)])


async def notify_managers(
    db: AsyncSession,
    type: NotificationType,
    message: str,
) -> int:
    """Create a notification for every ACTIVE manager and admin."""
    try:
        result = await db.execute(
            select(User.id).where(
                and_(
                    User.role.in_(MANAGER_ROLES),
                    User.status == UserStatus.ACTIVE,
                )
            )
        )
        manager_ids = result.scalars().all()
    except SQLAlchemyError:
        logger.error("Failed to load managers for notification", exc_info=True)
        return 0

    return await _persist(
        db,
        [Notification(user_id=manager_id, type=type, message=message) for manager_id in manager_ids],
    )


async def list_my_notifications(
    db: AsyncSession,
    user: User,
    unread_only: bool = False,
) -> List[Notification]:
    query = select(Notification).where(Notification.user_id == user.id)
    if unread_only:
        query = query.where(Notification.read.is_(False))
    result = await db.execute(query.order_by(Notification.created_at.desc()))
    return list(result.scalars().all())


async def mark_read(
    db: AsyncSession,
    user: User,
    notification_id: UUID,
) -> Notification:
    result = await db.execute(
        select(Notification).where(
            and_(
                Notification.id == notification_id,
                Notification.user_id == user.id,
            )
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise NotFoundError("Notification not found")

    notification.read = True
    await db.commit()
    await db.refresh(notification)
    return notification
