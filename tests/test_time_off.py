"""
Tests for time-off requests and their review.
"""
from datetime import date, datetime
import logging

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from timeclock.core.exceptions import NotFoundError, UnauthorizedError, ValidationError
from timeclock.models.notification import Notification, NotificationType
from timeclock.models.requests import RequestStatus, TimeOffRequest, TimeOffType
from timeclock.models.user import UserRole, UserStatus
from timeclock.schemas.requests import TimeOffRequestCreate
from timeclock.services import time_off_service


def request_for(start_day: int, end_day: int) -> TimeOffRequestCreate:
    return TimeOffRequestCreate(
        start_date=date(2025, 3, start_day),
        end_date=date(2025, 3, end_day),
        type=TimeOffType.VACATION,
        reason="Family trip",
    )


async def notifications_for(db, user_id):
    result = await db.execute(select(Notification).where(Notification.user_id == user_id))
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_create_time_off_request_notifies_active_managers(db, employee, manager, admin, make_user):
    inactive_manager = await make_user(role=UserRole.MANAGER, status=UserStatus.INACTIVE)

    request = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))
    assert request.status == RequestStatus.PENDING
    assert request.user_id == employee.id
    assert request.reason == "Family trip"

    for recipient in (manager, admin):
        notes = await notifications_for(db, recipient.id)
        assert len(notes) == 1
        assert notes[0].type == NotificationType.TIME_OFF_REQUEST
        assert notes[0].message == "New time-off request from employee@test.com"
    assert await notifications_for(db, inactive_manager.id) == []
    assert await notifications_for(db, employee.id) == []


@pytest.mark.asyncio
async def test_end_before_start_is_rejected(db, employee):
    with pytest.raises(ValidationError) as exc_info:
        await time_off_service.create_time_off_request(db, employee, request_for(12, 10))
    assert exc_info.value.message == "End date must be after or equal to start date"


@pytest.mark.asyncio
async def test_single_day_request_is_allowed(db, employee):
    request = await time_off_service.create_time_off_request(db, employee, request_for(10, 10))
    assert request.start_date == request.end_date


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "start_day, end_day",
    [
        (11, 13),  # partial overlap
        (1, 20),  # contains the existing request
        (11, 11),  # contained by the existing request
        (12, 14),  # shares the last day
    ],
)
async def test_overlapping_requests_are_rejected(db, employee, start_day, end_day):
    await time_off_service.create_time_off_request(db, employee, request_for(10, 12))

    with pytest.raises(ValidationError) as exc_info:
        await time_off_service.create_time_off_request(db, employee, request_for(start_day, end_day))
    assert exc_info.value.message == "Time-off request overlaps with existing request"


@pytest.mark.asyncio
async def test_adjacent_and_denied_requests_do_not_block(db, employee, manager):
    first = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))

    adjacent = await time_off_service.create_time_off_request(db, employee, request_for(13, 14))
    assert adjacent.status == RequestStatus.PENDING

    await time_off_service.deny_time_off_request(db, manager, first.id)
    again = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))
    assert again.status == RequestStatus.PENDING


@pytest.mark.asyncio
async def test_approve_time_off_request(db, employee, manager):
    request = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))

    approved = await time_off_service.approve_time_off_request(db, manager, request.id, "Enjoy")
    assert approved.status == RequestStatus.APPROVED
    assert approved.reviewed_by_id == manager.id
    assert approved.reviewed_at is not None
    assert approved.manager_notes == "Enjoy"

    notes = await notifications_for(db, employee.id)
    assert [n.message for n in notes] == ["Your time-off request has been approved"]
    assert notes[0].type == NotificationType.TIME_OFF_APPROVED


@pytest.mark.asyncio
async def test_deny_time_off_request_includes_notes(db, employee, manager):
    request = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))

    denied = await time_off_service.deny_time_off_request(db, manager, request.id, "Short staffed")
    assert denied.status == RequestStatus.DENIED

    notes = await notifications_for(db, employee.id)
    assert [n.message for n in notes] == ["Your time-off request has been denied: Short staffed"]


@pytest.mark.asyncio
async def test_reviewed_request_cannot_be_reviewed_again(db, employee, manager):
    request = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))
    request_id = request.id
    manager_id = manager.id
    await time_off_service.approve_time_off_request(db, manager, request_id)

    with pytest.raises(ValidationError) as exc_info:
        await time_off_service.deny_time_off_request(db, manager, request_id)
    assert exc_info.value.message == "Request has already been reviewed"

    stored = await db.get(TimeOffRequest, request_id)
    await db.refresh(stored)
    assert stored.status == RequestStatus.APPROVED
    assert stored.reviewed_by_id == manager_id


@pytest.mark.asyncio
async def test_review_missing_request(db, manager, employee):
    with pytest.raises(NotFoundError) as exc_info:
        await time_off_service.approve_time_off_request(db, manager, employee.id)
    assert exc_info.value.message == "Time-off request not found"


@pytest.mark.asyncio
async def test_employee_cannot_review(db, employee):
    request = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))

    with pytest.raises(UnauthorizedError) as exc_info:
        await time_off_service.approve_time_off_request(db, employee, request.id)
    assert exc_info.value.status_code == 403

    with pytest.raises(UnauthorizedError):
        await time_off_service.list_pending_time_off_requests(db, employee)


@pytest.mark.asyncio
async def test_pending_list_is_oldest_first(db, employee, manager, make_user):
    other = await make_user()
    newer = TimeOffRequest(
        user_id=employee.id,
        start_date=date(2025, 4, 1),
        end_date=date(2025, 4, 2),
        type=TimeOffType.SICK,
        created_at=datetime(2025, 3, 2, 9, 0),
    )
    older = TimeOffRequest(
        user_id=other.id,
        start_date=date(2025, 4, 1),
        end_date=date(2025, 4, 2),
        type=TimeOffType.PERSONAL,
        created_at=datetime(2025, 3, 1, 9, 0),
    )
    reviewed = TimeOffRequest(
        user_id=other.id,
        start_date=date(2025, 5, 1),
        end_date=date(2025, 5, 2),
        type=TimeOffType.OTHER,
        status=RequestStatus.APPROVED,
        created_at=datetime(2025, 2, 1, 9, 0),
    )
    db.add_all([newer, older, reviewed])
    await db.commit()

    pending = await time_off_service.list_pending_time_off_requests(db, manager)
    assert [r.id for r in pending] == [older.id, newer.id]

    mine = await time_off_service.list_my_time_off_requests(db, other)
    assert [r.id for r in mine] == [older.id, reviewed.id]


def fail_commits_after(monkeypatch, db, successful_commits: int):
    """Let the first ``successful_commits`` commits through, then fail every later one."""
    real_commit = db.commit
    calls = {"count": 0}

    async def commit():
        calls["count"] += 1
        if calls["count"] > successful_commits:
            raise OperationalError("INSERT INTO notifications", {}, Exception("disk I/O error"))
        await real_commit()

    monkeypatch.setattr(db, "commit", commit)


@pytest.mark.asyncio
async def test_notification_failure_keeps_submitted_request(db, employee, manager, monkeypatch, caplog):
    manager_id = manager.id
    caplog.set_level(logging.ERROR, logger="timeclock.services.notification_service")
    fail_commits_after(monkeypatch, db, successful_commits=1)

    request = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))
    assert request.status == RequestStatus.PENDING

    monkeypatch.undo()
    assert await db.scalar(select(func.count(TimeOffRequest.id))) == 1
    assert await notifications_for(db, manager_id) == []
    assert "Failed to persist notifications" in caplog.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "review, outcome",
    [
        (time_off_service.approve_time_off_request, RequestStatus.APPROVED),
        (time_off_service.deny_time_off_request, RequestStatus.DENIED),
    ],
)
async def test_notification_failure_keeps_review(db, employee, manager, monkeypatch, review, outcome):
    request = await time_off_service.create_time_off_request(db, employee, request_for(10, 12))
    request_id = request.id
    employee_id = employee.id
    fail_commits_after(monkeypatch, db, successful_commits=1)

    reviewed = await review(db, manager, request_id, "Noted")
    assert reviewed.status == outcome

    monkeypatch.undo()
    stored = await db.get(TimeOffRequest, request_id)
    await db.refresh(stored)
    assert stored.status == outcome
    assert stored.manager_notes == "Noted"
    assert await notifications_for(db, employee_id) == []
