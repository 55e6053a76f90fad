from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.database import transaction
from timeclock.core.dependencies import ensure_role
from timeclock.core.exceptions import ValidationError
from timeclock.models.notification import NotificationType
from timeclock.models.requests import RequestStatus, TimeOffRequest
from timeclock.models.user import User, MANAGER_ROLES
from timeclock.schemas.requests import TimeOffRequestCreate
from timeclock.services import notification_service
from timeclock.services.request_workflow import (
    ACTIVE_REQUEST_STATUSES,
    denial_message,
    list_for_user,
    list_pending,
    load_for_review,
    record_review,
)

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Time-off request not found"


async def create_time_off_request(
    db: AsyncSession,
    user: User,
    data: TimeOffRequestCreate,
) -> TimeOffRequest:
    """Submit a time-off request and notify managers."""
    if data.end_date < data.start_date:
        raise ValidationError("End date must be after or equal to start date")

    # Inclusive ranges: any shared day, including full containment, is an overlap
    result = await db.execute(
        select(TimeOffRequest.id).where(
            and_(
                TimeOffRequest.user_id == user.id,
                TimeOffRequest.status.in_(ACTIVE_REQUEST_STATUSES),
                TimeOffRequest.start_date <= data.end_date,
                TimeOffRequest.end_date >= data.start_date,
            )
        ).limit(1)
    )
    if result.scalar_one_or_none():
        raise ValidationError("Time-off request overlaps with existing request")

    request = TimeOffRequest(
        user_id=user.id,
        start_date=data.start_date,
        end_date=data.end_date,
        type=data.type,
        reason=data.reason or None,
        status=RequestStatus.PENDING,
    )
    db.add(request)
    await db.commit()
    logger.info(f"Time-off request {request.id} submitted by user {user.id}")

    await notification_service.notify_managers(
        db, NotificationType.TIME_OFF_REQUEST, f"New time-off request from {user.email}"
    )
    await db.refresh(request)
    return request


async def approve_time_off_request(
    db: AsyncSession,
    manager: User,
    request_id: UUID,
    manager_notes: Optional[str] = None,
) -> TimeOffRequest:
    ensure_role(manager, MANAGER_ROLES)

    async with transaction(db):
        request = await load_for_review(db, TimeOffRequest, request_id, NOT_FOUND_MESSAGE)
        record_review(request, manager, RequestStatus.APPROVED, manager_notes)
    requester_id = request.user_id
    logger.info(f"Time-off request {request_id} approved by {manager.id}")

    await notification_service.notify(
        db, requester_id, NotificationType.TIME_OFF_APPROVED, "Your time-off request has been approved"
    )
    await db.refresh(request)
    return request


async def deny_time_off_request(
    db: AsyncSession,
    manager: User,
    request_id: UUID,
    manager_notes: Optional[str] = None,
) -> TimeOffRequest:
    ensure_role(manager, MANAGER_ROLES)

    async with transaction(db):
        request = await load_for_review(db, TimeOffRequest, request_id, NOT_FOUND_MESSAGE)
        record_review(request, manager, RequestStatus.DENIED, manager_notes)
    requester_id = request.user_id
    logger.info(f"Time-off request {request_id} denied by {manager.id}")

    await notification_service.notify(
        db, requester_id, NotificationType.TIME_OFF_DENIED, denial_message("time-off", manager_notes)
    )
    await db.refresh(request)
    return request


async def list_my_time_off_requests(db: AsyncSession, user: User) -> List[TimeOffRequest]:
    return await list_for_user(db, TimeOffRequest, user)


async def list_pending_time_off_requests(db: AsyncSession, manager: User) -> List[TimeOffRequest]:
    ensure_role(manager, MANAGER_ROLES)
    return await list_pending(db, TimeOffRequest)
