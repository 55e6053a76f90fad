from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from datetime import datetime

from timeclock.core.database import get_db
from timeclock.core.dependencies import get_current_user, get_current_manager
from timeclock.core.error_handling import handle_endpoint_errors, parse_uuid
from timeclock.models.shift import ShiftStatus
from timeclock.models.user import User
from timeclock.schemas.shift import (
    BulkShiftCreate,
    BulkShiftResponse,
    ShiftCreate,
    ShiftResponse,
    ShiftUpdate,
)
from timeclock.services import shift_service

router = APIRouter()


@router.get("", response_model=List[ShiftResponse])
@handle_endpoint_errors(operation_name="list_shifts")
async def list_shifts_endpoint(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    status_filter: Optional[ShiftStatus] = Query(None, alias="status"),
    user_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List shifts. Employees only see their own."""
    return await shift_service.list_shifts(
        db,
        current_user,
        start=start,
        end=end,
        status=status_filter,
        user_id=parse_uuid(user_id, "user ID") if user_id else None,
    )


@router.get("/upcoming", response_model=List[ShiftResponse])
@handle_endpoint_errors(operation_name="get_upcoming_shifts")
async def get_upcoming_shifts_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await shift_service.get_upcoming_shifts(db, current_user)


@router.post("/bulk", response_model=BulkShiftResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="bulk_create_shifts")
async def bulk_create_shifts_endpoint(
    data: BulkShiftCreate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Create a batch of shifts; any invalid item rejects the whole batch."""
    shifts = await shift_service.bulk_create_shifts(db, current_user, data.shifts)
    return BulkShiftResponse(
        created=len(shifts),
        shifts=[ShiftResponse.model_validate(shift) for shift in shifts],
    )


@router.get("/{shift_id}", response_model=ShiftResponse)
@handle_endpoint_errors(operation_name="get_shift")
async def get_shift_endpoint(
    shift_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await shift_service.get_shift(db, current_user, parse_uuid(shift_id, "shift ID"))


@router.post("", response_model=ShiftResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_shift")
async def create_shift_endpoint(
    data: ShiftCreate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await shift_service.create_shift(db, current_user, data)


@router.put("/{shift_id}", response_model=ShiftResponse)
@handle_endpoint_errors(operation_name="update_shift")
async def update_shift_endpoint(
    shift_id: str,
    data: ShiftUpdate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await shift_service.update_shift(db, current_user, parse_uuid(shift_id, "shift ID"), data)


@router.delete("/{shift_id}")
@handle_endpoint_errors(operation_name="delete_shift")
async def delete_shift_endpoint(
    shift_id: str,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Hard-delete a shift with no time entries. Cancel it instead when history exists."""
    await shift_service.delete_shift(db, current_user, parse_uuid(shift_id, "shift ID"))
    return {"message": "Shift deleted successfully"}
