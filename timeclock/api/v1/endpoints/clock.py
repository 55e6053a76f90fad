from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from timeclock.core.database import get_db
from timeclock.core.dependencies import get_current_user, get_current_manager
from timeclock.core.error_handling import handle_endpoint_errors
from timeclock.models.user import User
from timeclock.schemas.time_entry import (
    ClockInRequest,
    ClockOutRequest,
    ClockEventResponse,
    LiveEntryResponse,
    ManualEntryCreate,
    TimeEntryListResponse,
    TimeEntryResponse,
)
from timeclock.services import clock_service

router = APIRouter()


@router.post("/in", response_model=ClockEventResponse)
@handle_endpoint_errors(operation_name="clock_in")
async def clock_in_endpoint(
    data: ClockInRequest,
    db: AsyncSession = Depends(get_db),
):
    """Kiosk clock-in by PIN. No bearer token; the PIN is the credential."""
    entry, user = await clock_service.clock_in(
        db,
        pin=data.pin,
        tablet_id=data.tablet_id,
        tablet_location=data.tablet_location,
    )
    return ClockEventResponse(
        message="Clocked in successfully",
        user_name=user.full_name,
        entry=TimeEntryResponse.model_validate(entry),
    )


@router.post("/out", response_model=ClockEventResponse)
@handle_endpoint_errors(operation_name="clock_out")
async def clock_out_endpoint(
    data: ClockOutRequest,
    db: AsyncSession = Depends(get_db),
):
    """Kiosk clock-out by PIN."""
    entry, user = await clock_service.clock_out(db, pin=data.pin)
    return ClockEventResponse(
        message="Clocked out successfully",
        user_name=user.full_name,
        entry=TimeEntryResponse.model_validate(entry),
    )


@router.get("/my-week", response_model=TimeEntryListResponse)
@handle_endpoint_errors(operation_name="get_my_week")
async def get_my_week_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await clock_service.get_my_week(db, current_user)


@router.get("/pay-period", response_model=TimeEntryListResponse)
@handle_endpoint_errors(operation_name="get_pay_period")
async def get_pay_period_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await clock_service.get_pay_period(db, current_user)


@router.post("/manual", response_model=TimeEntryResponse, status_code=201)
@handle_endpoint_errors(operation_name="create_manual_entry")
async def create_manual_entry_endpoint(
    data: ManualEntryCreate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Record a completed entry on an employee's behalf."""
    return await clock_service.create_manual_entry(
        db,
        current_user,
        user_id=data.user_id,
        shift_id=data.shift_id,
        clock_in_time=data.clock_in_time,
        clock_out_time=data.clock_out_time,
        note=data.note,
    )


@router.get("/live", response_model=List[LiveEntryResponse])
@handle_endpoint_errors(operation_name="get_live_clocked_in")
async def get_live_clocked_in_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Everyone currently clocked in, oldest clock-in first."""
    entries = await clock_service.get_live_clocked_in(db)
    return [
        LiveEntryResponse(
            entry_id=entry.id,
            user_id=entry.user_id,
            user_name=entry.user.full_name,
            shift_id=entry.shift_id,
            clock_in_time=entry.clock_in_time,
            tablet_location=entry.tablet_location,
            shift_start=entry.shift.start_time,
            shift_end=entry.shift.end_time,
        )
        for entry in entries
    ]
