"""
Reporting Service

Read-side rollups over persisted time entries. Nothing here writes.

Entries are attributed to a period by their clock-in time; an open entry
contributes zero hours until it is closed.
"""
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime
import logging

from sqlalchemy import select, and_, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from timeclock.core.config import settings
from timeclock.core.dependencies import ensure_role
from timeclock.core.exceptions import NotFoundError, ValidationError
from timeclock.models.requests import RequestStatus, ShiftChangeRequest, TimeOffRequest
from timeclock.models.shift import Shift
from timeclock.models.time_entry import TimeEntry
from timeclock.models.user import User, UserRole, UserStatus, MANAGER_ROLES
from timeclock.services.time_calculations import (
    day_range,
    local_now,
    to_naive_utc,
    to_utc_range,
    week_range,
)

logger = logging.getLogger(__name__)


def current_week_utc(now: Optional[datetime] = None) -> tuple[datetime, datetime]:
    """This week in the business time zone, as a naive UTC range."""
    local_start, local_end = week_range(local_now(settings.TIMEZONE, now))
    return to_utc_range(local_start, local_end, settings.TIMEZONE)


async def _entries_with_users(
    db: AsyncSession,
    start: datetime,
    end: datetime,
) -> List[TimeEntry]:
    result = await db.execute(
        select(TimeEntry)
        .options(selectinload(TimeEntry.user))
        .where(
            and_(
                TimeEntry.clock_in_time >= start,
                TimeEntry.clock_in_time <= end,
            )
        )
    )
    return list(result.scalars().all())


def _group_by_user(entries: List[TimeEntry]) -> Dict[UUID, dict]:
    grouped: Dict[UUID, dict] = {}
    for entry in entries:
        row = grouped.setdefault(
            entry.user_id,
            {"user": entry.user, "total_hours": 0.0, "entry_count": 0},
        )
        row["total_hours"] += entry.total_hours or 0
        row["entry_count"] += 1
    return grouped


async def weekly_hours_report(
    db: AsyncSession,
    manager: User,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    now: Optional[datetime] = None,
) -> dict:
    """Hours per employee, most hours first. Defaults to the current week when either bound is missing."""
    ensure_role(manager, MANAGER_ROLES)

    if start and end:
        start, end = to_naive_utc(start), to_naive_utc(end)
    else:
        start, end = current_week_utc(now)

    grouped = _group_by_user(await _entries_with_users(db, start, end))
    employees = [
        {
            "user_id": user_id,
            "name": row["user"].full_name,
            "email": row["user"].email,
            "total_hours": round(row["total_hours"], 2),
            "entry_count": row["entry_count"],
        }
        for user_id, row in grouped.items()
    ]
    employees.sort(key=lambda e: (-e["total_hours"], e["name"]))

    return {
        "start": start,
        "end": end,
        "employees": employees,
        "total_hours": round(sum(row["total_hours"] for row in grouped.values()), 2),
    }


async def labor_cost_report(
    db: AsyncSession,
    manager: User,
    start: Optional[datetime],
    end: Optional[datetime],
    hourly_rate: Optional[float] = None,
) -> dict:
    """
    Hours and cost per employee, highest cost first.

    Rate precedence: the explicit ``hourly_rate``, then the employee's stored
    rate, then DEFAULT_HOURLY_RATE.
    """
    ensure_role(manager, MANAGER_ROLES)

    if not start or not end:
        logger.info("Labor cost report rejected: missing date range")
        raise ValidationError("Start date and end date are required")
    start, end = to_naive_utc(start), to_naive_utc(end)
    if end < start:
        logger.info(f"Labor cost report rejected: end {end} before start {start}")
        raise ValidationError("End date must be after start date")
    if hourly_rate is not None and hourly_rate < 0:
        logger.info(f"Labor cost report rejected: negative hourly rate {hourly_rate}")
        raise ValidationError("Hourly rate cannot be negative")

    grouped = _group_by_user(await _entries_with_users(db, start, end))
    employees = []
    total_cost = 0.0
    total_hours = 0.0
    for user_id, row in grouped.items():
        user = row["user"]
        if hourly_rate is not None:
            rate = hourly_rate
        elif user.hourly_rate is not None:
            rate = user.hourly_rate
        else:
            rate = settings.DEFAULT_HOURLY_RATE
        cost = row["total_hours"] * rate
        total_cost += cost
        total_hours += row["total_hours"]
        employees.append({
            "user_id": user_id,
            "name": user.full_name,
            "email": user.email,
            "total_hours": round(row["total_hours"], 2),
            "hourly_rate": rate,
            "total_cost": round(cost, 2),
        })
    employees.sort(key=lambda e: (-e["total_cost"], e["name"]))

    return {
        "start": start,
        "end": end,
        "employees": employees,
        "total_hours": round(total_hours, 2),
        "total_cost": round(total_cost, 2),
    }


async def dashboard_stats(
    db: AsyncSession,
    manager: User,
    now: Optional[datetime] = None,
) -> dict:
    """Independent point-in-time counts for the manager dashboard."""
    ensure_role(manager, MANAGER_ROLES)

    today_start, today_end = to_utc_range(*day_range(local_now(settings.TIMEZONE, now)), settings.TIMEZONE)
    week_start, week_end = current_week_utc(now)

    clocked_in = await db.scalar(
        select(func.count(TimeEntry.id)).where(TimeEntry.clock_out_time.is_(None))
    )
    todays_shifts = await db.scalar(
        select(func.count(Shift.id)).where(
            and_(Shift.start_time >= today_start, Shift.start_time <= today_end)
        )
    )
    pending_time_off = await db.scalar(
        select(func.count(TimeOffRequest.id)).where(TimeOffRequest.status == RequestStatus.PENDING)
    )
    pending_shift_changes = await db.scalar(
        select(func.count(ShiftChangeRequest.id)).where(ShiftChangeRequest.status == RequestStatus.PENDING)
    )
    week_hours = await db.scalar(
        select(func.coalesce(func.sum(TimeEntry.total_hours), 0.0)).where(
            and_(TimeEntry.clock_in_time >= week_start, TimeEntry.clock_in_time <= week_end)
        )
    )
    active_employees = await db.scalar(
        select(func.count(User.id)).where(
            and_(User.role == UserRole.EMPLOYEE, User.status == UserStatus.ACTIVE)
        )
    )

    return {
        "currently_clocked_in": clocked_in or 0,
        "todays_shifts": todays_shifts or 0,
        "pending_time_off_requests": pending_time_off or 0,
        "pending_shift_change_requests": pending_shift_changes or 0,
        "this_week_hours": round(float(week_hours or 0), 2),
        "active_employees": active_employees or 0,
    }


async def employee_history(
    db: AsyncSession,
    manager: User,
    user_id: UUID,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    limit: Optional[int] = None,
) -> dict:
    """One employee's entries, newest first."""
    ensure_role(manager, MANAGER_ROLES)

    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    query = select(TimeEntry).where(TimeEntry.user_id == user.id)
    if start:
        query = query.where(TimeEntry.clock_in_time >= to_naive_utc(start))
    if end:
        query = query.where(TimeEntry.clock_in_time <= to_naive_utc(end))
    query = query.order_by(TimeEntry.clock_in_time.desc())
    if limit:
        query = query.limit(limit)

    result = await db.execute(query)
    entries = list(result.scalars().all())

    return {
        "user_id": user.id,
        "name": user.full_name,
        "entries": entries,
        "total_hours": round(sum(entry.total_hours or 0 for entry in entries), 2),
    }
