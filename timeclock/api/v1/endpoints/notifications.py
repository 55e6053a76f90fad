from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from timeclock.core.database import get_db
from timeclock.core.dependencies import get_current_user
from timeclock.core.error_handling import handle_endpoint_errors, parse_uuid
from timeclock.models.user import User
from timeclock.schemas.notification import NotificationResponse
from timeclock.services import notification_service

router = APIRouter()


@router.get("/my", response_model=List[NotificationResponse])
@handle_endpoint_errors(operation_name="list_my_notifications")
async def list_my_notifications_endpoint(
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_service.list_my_notifications(db, current_user, unread_only=unread_only)


@router.put("/{notification_id}/read", response_model=NotificationResponse)
@handle_endpoint_errors(operation_name="mark_notification_read")
async def mark_notification_read_endpoint(
    notification_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await notification_service.mark_read(db, current_user, parse_uuid(notification_id, "notification ID"))
