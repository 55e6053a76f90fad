"""
Shift Scheduling Service

Handles shift creation, updates, deletion and bulk import.

Non-cancelled shifts of one user never overlap. Intervals are half-open, so a
shift ending at 12:00 and another starting at 12:00 are both allowed. Every
write path (create, update, bulk, shift-change approval) goes through
``find_overlapping_shift``.
"""
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime, timedelta
import logging

from sqlalchemy import select, and_, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from timeclock.core.database import transaction
from timeclock.core.dependencies import ensure_role
from timeclock.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from timeclock.models.requests import ShiftChangeRequest
from timeclock.models.shift import Shift, ShiftStatus, CLOCKABLE_SHIFT_STATUSES
from timeclock.models.time_entry import TimeEntry
from timeclock.models.user import User, UserRole, UserStatus, MANAGER_ROLES
from timeclock.schemas.shift import ShiftCreate, ShiftUpdate, BulkShiftItem
from timeclock.services.time_calculations import ranges_overlap, to_naive_utc, utcnow

logger = logging.getLogger(__name__)

OVERLAP_MESSAGE = "Shift overlaps with existing shift"
END_BEFORE_START_MESSAGE = "End time must be after start time"
UPCOMING_WINDOW = timedelta(days=7)


async def find_overlapping_shift(
    db: AsyncSession,
    user_id: UUID,
    start_time: datetime,
    end_time: datetime,
    exclude_shift_id: Optional[UUID] = None,
) -> Optional[Shift]:
    """First non-cancelled shift of ``user_id`` whose [start, end) intersects the given one."""
    query = select(Shift).where(
        and_(
            Shift.user_id == user_id,
            Shift.status != ShiftStatus.CANCELLED,
            Shift.start_time < end_time,
            Shift.end_time > start_time,
        )
    )
    if exclude_shift_id:
        query = query.where(Shift.id != exclude_shift_id)

    result = await db.execute(query.order_by(Shift.start_time.asc()).limit(1))
    return result.scalar_one_or_none()


async def _get_active_user(db: AsyncSession, user_id: UUID) -> Optional[User]:
    user = await db.get(User, user_id)
    if not user or user.status != UserStatus.ACTIVE:
        return None
    return user


async def get_shift(
    db: AsyncSession,
    principal: User,
    shift_id: UUID,
) -> Shift:
    shift = await db.get(Shift, shift_id)
    if not shift:
        raise NotFoundError("Shift not found")
    if principal.role == UserRole.EMPLOYEE and shift.user_id != principal.id:
        raise UnauthorizedError("You can only view your own shifts", status_code=403)
    return shift


async def list_shifts(
    db: AsyncSession,
    principal: User,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    status: Optional[ShiftStatus] = None,
    user_id: Optional[UUID] = None,
) -> List[Shift]:
    """Shifts ordered by start. Employees only ever see their own."""
    query = select(Shift)

    if principal.role == UserRole.EMPLOYEE:
        query = query.where(Shift.user_id == principal.id)
    elif user_id:
        query = query.where(Shift.user_id == user_id)

    if start:
        query = query.where(Shift.start_time >= to_naive_utc(start))
    if end:
        query = query.where(Shift.start_time <= to_naive_utc(end))
    if status:
        query = query.where(Shift.status == status)

    result = await db.execute(query.order_by(Shift.start_time.asc()))
    return list(result.scalars().all())


async def get_upcoming_shifts(
    db: AsyncSession,
    user: User,
    now: Optional[datetime] = None,
) -> List[Shift]:
    """The user's SCHEDULED/IN_PROGRESS shifts starting within the next 7 days."""
    now = to_naive_utc(now) or utcnow()
    result = await db.execute(
        select(Shift)
        .where(
            and_(
                Shift.user_id == user.id,
                Shift.status.in_(CLOCKABLE_SHIFT_STATUSES),
                Shift.start_time >= now,
                Shift.start_time <= now + UPCOMING_WINDOW,
            )
        )
        .order_by(Shift.start_time.asc())
    )
    return list(result.scalars().all())


async def create_shift(
    db: AsyncSession,
    manager: User,
    data: ShiftCreate,
) -> Shift:
    """Create a shift for an active user after checking it against their other shifts."""
    ensure_role(manager, MANAGER_ROLES)

    start_time = to_naive_utc(data.start_time)
    end_time = to_naive_utc(data.end_time)
    if end_time <= start_time:
        raise ValidationError(END_BEFORE_START_MESSAGE)

    user = await _get_active_user(db, data.user_id)
    if not user:
        raise NotFoundError("User not found or inactive")

    if await find_overlapping_shift(db, user.id, start_time, end_time):
        raise ValidationError(OVERLAP_MESSAGE)

    shift = Shift(
        user_id=user.id,
        start_time=start_time,
        end_time=end_time,
        location=data.location or None,
        position=data.position or None,
        created_by_id=manager.id,
    )
    db.add(shift)
    await db.commit()
    await db.refresh(shift)

    logger.info(
        f"Shift {shift.id} created for user {user.id}",
        extra={"shift_id": str(shift.id), "user_id": str(user.id), "created_by": str(manager.id)},
    )
    return shift


async def update_shift(
    db: AsyncSession,
    manager: User,
    shift_id: UUID,
    data: ShiftUpdate,
) -> Shift:
    """
    Partial update.

    The merged start/end must satisfy end > start, and whenever the times
    change (or a cancelled shift is restored) the overlap check is re-run
    against the owner's other shifts.
    """
    ensure_role(manager, MANAGER_ROLES)

    shift = await db.get(Shift, shift_id)
    if not shift:
        raise NotFoundError("Shift not found")

    changes = data.model_dump(exclude_unset=True)
    new_start = to_naive_utc(changes["start_time"]) if changes.get("start_time") else shift.start_time
    new_end = to_naive_utc(changes["end_time"]) if changes.get("end_time") else shift.end_time
    new_status = changes.get("status") or shift.status

    if new_end <= new_start:
        raise ValidationError(END_BEFORE_START_MESSAGE)

    times_changed = new_start != shift.start_time or new_end != shift.end_time
    restored = shift.status == ShiftStatus.CANCELLED and new_status != ShiftStatus.CANCELLED
    if new_status != ShiftStatus.CANCELLED and (times_changed or restored):
        if await find_overlapping_shift(db, shift.user_id, new_start, new_end, exclude_shift_id=shift.id):
            raise ValidationError(OVERLAP_MESSAGE)

    shift.start_time = new_start
    shift.end_time = new_end
    shift.status = new_status
    if "location" in changes:
        shift.location = changes["location"] or None
    if "position" in changes:
        shift.position = changes["position"] or None

    await db.commit()
    await db.refresh(shift)

    logger.info(f"Shift {shift.id} updated", extra={"shift_id": str(shift.id), "fields": list(changes)})
    return shift


async def delete_shift(
    db: AsyncSession,
    manager: User,
    shift_id: UUID,
) -> None:
    """Hard-delete a shift that no time entry references."""
    ensure_role(manager, MANAGER_ROLES)

    shift = await db.get(Shift, shift_id)
    if not shift:
        raise NotFoundError("Shift not found")

    entry_count = await db.scalar(
        select(func.count(TimeEntry.id)).where(TimeEntry.shift_id == shift.id)
    )
    if entry_count:
        raise ValidationError("Cannot delete shift with time entries. Cancel it instead.")

    async with transaction(db):
        await db.execute(
            delete(ShiftChangeRequest).where(ShiftChangeRequest.original_shift_id == shift_id)
        )
        await db.delete(shift)

    logger.info(f"Shift {shift_id} deleted", extra={"shift_id": str(shift_id), "deleted_by": str(manager.id)})


async def bulk_create_shifts(
    db: AsyncSession,
    manager: User,
    items: List[BulkShiftItem],
) -> List[Shift]:
    """
    Create a batch of shifts, all or nothing.

    Each item is checked for required fields, end > start, an active owner,
    overlap with stored shifts and overlap with earlier items of the same
    batch for the same user. The first failing item rejects the whole batch.
    """
    ensure_role(manager, MANAGER_ROLES)

    if not items:
        raise ValidationError("Shifts array is required")

    for item in items:
        if not item.user_id or not item.start_time or not item.end_time:
            raise ValidationError("Each shift must have userId, startTime, and endTime")

    users: Dict[UUID, Optional[User]] = {}
    accepted: List[Shift] = []

    for index, item in enumerate(items, start=1):
        start_time = to_naive_utc(item.start_time)
        end_time = to_naive_utc(item.end_time)
        if end_time <= start_time:
            raise ValidationError(f"Shift {index}: {END_BEFORE_START_MESSAGE}")

        if item.user_id not in users:
            users[item.user_id] = await _get_active_user(db, item.user_id)
        if users[item.user_id] is None:
            raise ValidationError(f"Shift {index}: User not found or inactive")

        if await find_overlapping_shift(db, item.user_id, start_time, end_time):
            raise ValidationError(f"Shift {index}: {OVERLAP_MESSAGE}")

        for earlier_index, earlier in enumerate(accepted, start=1):
            if earlier.user_id == item.user_id and ranges_overlap(
                earlier.start_time, earlier.end_time, start_time, end_time
            ):
                raise ValidationError(f"Shift {index}: overlaps with shift {earlier_index} in the same batch")

        accepted.append(
            Shift(
                user_id=item.user_id,
                start_time=start_time,
                end_time=end_time,
                location=item.location or None,
                position=item.position or None,
                created_by_id=manager.id,
            )
        )

    async with transaction(db):
        db.add_all(accepted)
        await db.flush()

    for shift in accepted:
        await db.refresh(shift)

    logger.info(
        f"Bulk created {len(accepted)} shifts",
        extra={"count": len(accepted), "created_by": str(manager.id)},
    )
    return accepted
