"""
Shared review lifecycle for time-off and shift-change requests.

PENDING -> APPROVED | DENIED. Both outcomes are terminal; reviewing a request
twice is a validation error, never a silent overwrite.
"""
from typing import List, Optional, Type, TypeVar, Union
from uuid import UUID
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.exceptions import NotFoundError, ValidationError
from timeclock.models.requests import RequestStatus, ShiftChangeRequest, TimeOffRequest
from timeclock.models.user import User
from timeclock.services.time_calculations import utcnow

ReviewableRequest = TypeVar("ReviewableRequest", TimeOffRequest, ShiftChangeRequest)

ALREADY_REVIEWED_MESSAGE = "Request has already been reviewed"
ACTIVE_REQUEST_STATUSES = [RequestStatus.PENDING, RequestStatus.APPROVED]


async def load_for_review(
    db: AsyncSession,
    model: Type[ReviewableRequest],
    request_id: UUID,
    not_found_message: str,
) -> ReviewableRequest:
    """Lock the request row and make sure it is still PENDING."""
    result = await db.execute(
        select(model).where(model.id == request_id).with_for_update()
    )
    request = result.scalar_one_or_none()
    if not request:
        raise NotFoundError(not_found_message)
    if request.status != RequestStatus.PENDING:
        raise ValidationError(ALREADY_REVIEWED_MESSAGE)
    return request


def record_review(
    request: Union[TimeOffRequest, ShiftChangeRequest],
    reviewer: User,
    outcome: RequestStatus,
    manager_notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> None:
    request.status = outcome
    request.reviewed_by_id = reviewer.id
    request.reviewed_at = now or utcnow()
    request.manager_notes = manager_notes or None


def denial_message(subject: str, manager_notes: Optional[str]) -> str:
    message = f"Your {subject} request has been denied"
    if manager_notes:
        message += f": {manager_notes}"
    return message


async def list_for_user(
    db: AsyncSession,
    model: Type[ReviewableRequest],
    user: User,
) -> List[ReviewableRequest]:
    result = await db.execute(
        select(model).where(model.user_id == user.id).order_by(model.created_at.desc())
    )
    return list(result.scalars().all())


async def list_pending(
    db: AsyncSession,
    model: Type[ReviewableRequest],
) -> List[ReviewableRequest]:
    """Pending requests, oldest first."""
    result = await db.execute(
        select(model)
        .where(model.status == RequestStatus.PENDING)
        .order_by(model.created_at.asc())
    )
    return list(result.scalars().all())
