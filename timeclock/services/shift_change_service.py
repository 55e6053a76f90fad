"""
Shift Change Request Service

Employees ask to move one of their shifts; a manager approves or denies.
Approval is the one place a write cascades across entities: the request and
the shift it targets are updated in a single transaction or not at all.
"""
from typing import List, Optional
from uuid import UUID
import logging

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.database import transaction
from timeclock.core.dependencies import ensure_role
from timeclock.core.exceptions import NotFoundError, ValidationError
from timeclock.models.notification import NotificationType
from timeclock.models.requests import RequestStatus, ShiftChangeRequest
from timeclock.models.shift import Shift, ShiftStatus
from timeclock.models.user import User, MANAGER_ROLES
from timeclock.schemas.requests import ShiftChangeRequestCreate
from timeclock.services import notification_service
from timeclock.services.request_workflow import (
    denial_message,
    list_for_user,
    list_pending,
    load_for_review,
    record_review,
)
from timeclock.services.shift_service import find_overlapping_shift
from timeclock.services.time_calculations import to_naive_utc

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Shift change request not found"
LOCKED_SHIFT_STATUSES = [ShiftStatus.CANCELLED, ShiftStatus.COMPLETED]


async def create_shift_change_request(
    db: AsyncSession,
    user: User,
    data: ShiftChangeRequestCreate,
) -> ShiftChangeRequest:
    shift = await db.get(Shift, data.original_shift_id)
    if not shift:
        raise NotFoundError("Shift not found")
    if shift.user_id != user.id:
        raise ValidationError("You can only request changes to your own shifts")
    if shift.status in LOCKED_SHIFT_STATUSES:
        raise ValidationError(f"Cannot change a {shift.status.value.lower()} shift")

    requested_start = to_naive_utc(data.requested_start_time)
    requested_end = to_naive_utc(data.requested_end_time)
    if requested_end <= requested_start:
        raise ValidationError("Requested end time must be after start time")

    result = await db.execute(
        select(ShiftChangeRequest.id).where(
            and_(
                ShiftChangeRequest.original_shift_id == shift.id,
                ShiftChangeRequest.status == RequestStatus.PENDING,
            )
        ).limit(1)
    )
    if result.scalar_one_or_none():
        raise ValidationError("A pending change request already exists for this shift")

    request = ShiftChangeRequest(
        user_id=user.id,
        original_shift_id=shift.id,
        requested_start_time=requested_start,
        requested_end_time=requested_end,
        reason=data.reason or None,
        status=RequestStatus.PENDING,
    )
    db.add(request)
    await db.commit()
    logger.info(f"Shift change request {request.id} submitted for shift {shift.id}")

    await notification_service.notify_managers(
        db, NotificationType.SHIFT_CHANGE_REQUEST, f"New shift change request from {user.email}"
    )
    await db.refresh(request)
    return request


async def approve_shift_change_request(
    db: AsyncSession,
    manager: User,
    request_id: UUID,
    manager_notes: Optional[str] = None,
) -> ShiftChangeRequest:
    """
    Approve the request and move the shift to the requested window.

    The requested window is re-checked against the owner's other shifts at
    approval time. Any failure leaves both the request and the shift unchanged.
    """
    ensure_role(manager, MANAGER_ROLES)

    async with transaction(db):
        request = await load_for_review(db, ShiftChangeRequest, request_id, NOT_FOUND_MESSAGE)

        result = await db.execute(
            select(Shift).where(Shift.id == request.original_shift_id).with_for_update()
        )
        shift = result.scalar_one_or_none()
        if not shift:
            raise NotFoundError("Shift not found")
        if shift.status in LOCKED_SHIFT_STATUSES:
            raise ValidationError(f"Cannot change a {shift.status.value.lower()} shift")

        if await find_overlapping_shift(
            db,
            shift.user_id,
            request.requested_start_time,
            request.requested_end_time,
            exclude_shift_id=shift.id,
        ):
            raise ValidationError("Requested time overlaps with another shift")

        record_review(request, manager, RequestStatus.APPROVED, manager_notes)
        shift.start_time = request.requested_start_time
        shift.end_time = request.requested_end_time
        await db.flush()

    requester_id = request.user_id
    logger.info(
        f"Shift change request {request_id} approved by {manager.id}",
        extra={"request_id": str(request_id), "shift_id": str(request.original_shift_id)},
    )

    await notification_service.notify(
        db, requester_id, NotificationType.SHIFT_CHANGE_APPROVED, "Your shift change request has been approved"
    )
    await db.refresh(request)
    return request


async def deny_shift_change_request(
    db: AsyncSession,
    manager: User,
    request_id: UUID,
    manager_notes: Optional[str] = None,
) -> ShiftChangeRequest:
    ensure_role(manager, MANAGER_ROLES)

    async with transaction(db):
        request = await load_for_review(db, ShiftChangeRequest, request_id, NOT_FOUND_MESSAGE)
        record_review(request, manager, RequestStatus.DENIED, manager_notes)
    requester_id = request.user_id
    logger.info(f"Shift change request {request_id} denied by {manager.id}")

    await notification_service.notify(
        db, requester_id, NotificationType.SHIFT_CHANGE_DENIED, denial_message("shift change", manager_notes)
    )
    await db.refresh(request)
    return request


async def list_my_shift_change_requests(db: AsyncSession, user: User) -> List[ShiftChangeRequest]:
    return await list_for_user(db, ShiftChangeRequest, user)


async def list_pending_shift_change_requests(db: AsyncSession, manager: User) -> List[ShiftChangeRequest]:
    ensure_role(manager, MANAGER_ROLES)
    return await list_pending(db, ShiftChangeRequest)
