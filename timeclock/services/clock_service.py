"""
Clock Service

Kiosk clock-in/clock-out by PIN and manager-authored corrections.

A user holds at most one open time entry. The application checks first so the
common case gets a friendly error, and the partial unique index on
time_entries(user_id) WHERE clock_out_time IS NULL settles concurrent clock-ins.
"""
from typing import List, Optional, Tuple
from uuid import UUID
from datetime import datetime
import logging

from sqlalchemy import select, and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from timeclock.core.config import settings
from timeclock.core.database import transaction
from timeclock.core.dependencies import ensure_role
from timeclock.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from timeclock.core.security import get_pin_digest
from timeclock.models.shift import Shift, ShiftStatus, CLOCKABLE_SHIFT_STATUSES
from timeclock.models.time_entry import TimeEntry
from timeclock.models.user import User, UserStatus, MANAGER_ROLES
from timeclock.services.time_calculations import (
    EARLY_CLOCK_IN_GRACE,
    hours_between,
    local_now,
    pay_period_range,
    to_naive_utc,
    to_utc_range,
    utcnow,
    week_range,
)

logger = logging.getLogger(__name__)

INVALID_PIN_MESSAGE = "Invalid PIN or inactive account"
ALREADY_CLOCKED_IN_MESSAGE = "You are already clocked in"


async def resolve_user_by_pin(db: AsyncSession, pin: str) -> User:
    """Resolve the single ACTIVE user holding ``pin``."""
    result = await db.execute(
        select(User).where(
            and_(
                User.pin_digest == get_pin_digest(pin),
                User.status == UserStatus.ACTIVE,
            )
        )
    )
    user = result.scalar_one_or_none()
    if not user:
        raise UnauthorizedError(INVALID_PIN_MESSAGE)
    return user


async def get_open_entry(
    db: AsyncSession,
    user_id: UUID,
    for_update: bool = False,
) -> Optional[TimeEntry]:
    query = select(TimeEntry).where(
        and_(
            TimeEntry.user_id == user_id,
            TimeEntry.clock_out_time.is_(None),
        )
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def find_clockable_shift(
    db: AsyncSession,
    user_id: UUID,
    now: datetime,
) -> Optional[Shift]:
    """Earliest SCHEDULED/IN_PROGRESS shift starting within 15 minutes and not yet ended."""
    result = await db.execute(
        select(Shift)
        .where(
            and_(
                Shift.user_id == user_id,
                Shift.status.in_(CLOCKABLE_SHIFT_STATUSES),
                Shift.start_time <= now + EARLY_CLOCK_IN_GRACE,
                Shift.end_time >= now,
            )
        )
        .order_by(Shift.start_time.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def clock_in(
    db: AsyncSession,
    pin: str,
    tablet_id: str,
    tablet_location: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[TimeEntry, User]:
    """Open a time entry against the user's current shift and mark the shift IN_PROGRESS."""
    if not pin or not pin.strip():
        raise ValidationError("PIN is required")
    if not tablet_id or not tablet_id.strip():
        raise ValidationError("Tablet ID is required")

    now = to_naive_utc(now) or utcnow()
    user = await resolve_user_by_pin(db, pin.strip())
    user_id = user.id

    if await get_open_entry(db, user_id):
        raise ConflictError(ALREADY_CLOCKED_IN_MESSAGE)

    shift = await find_clockable_shift(db, user_id, now)
    if not shift:
        raise NotFoundError("No scheduled shift found for this time")

    entry = TimeEntry(
        user_id=user_id,
        shift_id=shift.id,
        clock_in_time=now,
        tablet_id=tablet_id.strip(),
        tablet_location=tablet_location or None,
    )
    try:
        async with transaction(db):
            db.add(entry)
            shift.status = ShiftStatus.IN_PROGRESS
            await db.flush()
    except IntegrityError:
        # Lost the race against a concurrent clock-in for the same user
        logger.warning(f"Concurrent clock-in rejected by storage for user {user_id}")
        raise ConflictError(ALREADY_CLOCKED_IN_MESSAGE)

    await db.refresh(entry)
    logger.info(
        f"User {user.id} clocked in on shift {shift.id}",
        extra={"user_id": str(user.id), "shift_id": str(shift.id), "tablet_id": entry.tablet_id},
    )
    return entry, user


async def clock_out(
    db: AsyncSession,
    pin: str,
    now: Optional[datetime] = None,
) -> Tuple[TimeEntry, User]:
    """Close the user's open entry and mark its shift COMPLETED, atomically."""
    if not pin or not pin.strip():
        raise ValidationError("PIN is required")

    now = to_naive_utc(now) or utcnow()
    user = await resolve_user_by_pin(db, pin.strip())

    async with transaction(db):
        entry = await get_open_entry(db, user.id, for_update=True)
        if not entry:
            raise NotFoundError("No active clock-in found")

        entry.clock_out_time = now
        entry.total_hours = hours_between(entry.clock_in_time, now)

        shift = await db.get(Shift, entry.shift_id)
        if shift:
            shift.status = ShiftStatus.COMPLETED
        await db.flush()

    await db.refresh(entry)
    logger.info(
        f"User {user.id} clocked out after {entry.total_hours} hours",
        extra={"user_id": str(user.id), "entry_id": str(entry.id)},
    )
    return entry, user


async def create_manual_entry(
    db: AsyncSession,
    manager: User,
    user_id: UUID,
    shift_id: UUID,
    clock_in_time: datetime,
    clock_out_time: datetime,
    note: Optional[str] = None,
) -> TimeEntry:
    """Record a completed entry on behalf of an employee. Shift status is left untouched."""
    ensure_role(manager, MANAGER_ROLES)

    if not user_id or not shift_id or not clock_in_time or not clock_out_time:
        raise ValidationError("User ID, shift ID, clock in time, and clock out time are required")

    clock_in_time = to_naive_utc(clock_in_time)
    clock_out_time = to_naive_utc(clock_out_time)
    if clock_out_time <= clock_in_time:
        raise ValidationError("Clock out time must be after clock in time")

    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    shift = await db.get(Shift, shift_id)
    if not shift:
        raise NotFoundError("Shift not found")
    if shift.user_id != user.id:
        raise ValidationError("Shift does not belong to this user")

    entry = TimeEntry(
        user_id=user.id,
        shift_id=shift.id,
        clock_in_time=clock_in_time,
        clock_out_time=clock_out_time,
        total_hours=hours_between(clock_in_time, clock_out_time),
        manual_entry=True,
        manual_entry_by_id=manager.id,
        manual_entry_note=note or None,
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)

    logger.info(
        f"Manual entry {entry.id} created for user {user.id} by {manager.id}",
        extra={"entry_id": str(entry.id), "user_id": str(user.id), "manager_id": str(manager.id)},
    )
    return entry


async def get_entries_in_range(
    db: AsyncSession,
    user_id: UUID,
    start: datetime,
    end: datetime,
) -> List[TimeEntry]:
    result = await db.execute(
        select(TimeEntry)
        .where(
            and_(
                TimeEntry.user_id == user_id,
                TimeEntry.clock_in_time >= start,
                TimeEntry.clock_in_time <= end,
            )
        )
        .order_by(TimeEntry.clock_in_time.desc())
    )
    return list(result.scalars().all())


def _summarize(start: datetime, end: datetime, entries: List[TimeEntry]) -> dict:
    total = sum(entry.total_hours or 0 for entry in entries)
    return {
        "start": start,
        "end": end,
        "entries": entries,
        "total_hours": round(total, 2),
    }


async def get_my_week(
    db: AsyncSession,
    user: User,
    now: Optional[datetime] = None,
) -> dict:
    """The user's entries for the current business-time-zone week."""
    local_start, local_end = week_range(local_now(settings.TIMEZONE, now))
    start, end = to_utc_range(local_start, local_end, settings.TIMEZONE)
    return _summarize(start, end, await get_entries_in_range(db, user.id, start, end))


async def get_pay_period(
    db: AsyncSession,
    user: User,
    now: Optional[datetime] = None,
) -> dict:
    """The user's entries for the current pay period."""
    local_start, local_end = pay_period_range(local_now(settings.TIMEZONE, now))
    start, end = to_utc_range(local_start, local_end, settings.TIMEZONE)
    return _summarize(start, end, await get_entries_in_range(db, user.id, start, end))


async def get_live_clocked_in(db: AsyncSession) -> List[TimeEntry]:
    """Every open entry with its user and shift, oldest clock-in first."""
    result = await db.execute(
        select(TimeEntry)
        .options(selectinload(TimeEntry.user), selectinload(TimeEntry.shift))
        .where(TimeEntry.clock_out_time.is_(None))
        .order_by(TimeEntry.clock_in_time.asc())
    )
    return list(result.scalars().all())
