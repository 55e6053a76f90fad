from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from timeclock.core.database import get_db
from timeclock.core.dependencies import get_current_user, get_current_manager
from timeclock.core.error_handling import handle_endpoint_errors, parse_uuid
from timeclock.models.user import User
from timeclock.schemas.requests import (
    ReviewRequest,
    ShiftChangeRequestCreate,
    ShiftChangeRequestResponse,
)
from timeclock.services import shift_change_service

router = APIRouter()


@router.post("", response_model=ShiftChangeRequestResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_shift_change_request")
async def create_shift_change_request_endpoint(
    data: ShiftChangeRequestCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Ask to move one of your own shifts; managers are notified."""
    return await shift_change_service.create_shift_change_request(db, current_user, data)


@router.get("/my", response_model=List[ShiftChangeRequestResponse])
@handle_endpoint_errors(operation_name="list_my_shift_change_requests")
async def list_my_shift_change_requests_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await shift_change_service.list_my_shift_change_requests(db, current_user)


@router.get("/pending", response_model=List[ShiftChangeRequestResponse])
@handle_endpoint_errors(operation_name="list_pending_shift_change_requests")
async def list_pending_shift_change_requests_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await shift_change_service.list_pending_shift_change_requests(db, current_user)


@router.put("/{request_id}/approve", response_model=ShiftChangeRequestResponse)
@handle_endpoint_errors(operation_name="approve_shift_change_request")
async def approve_shift_change_request_endpoint(
    request_id: str,
    data: Optional[ReviewRequest] = None,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    """Approve and move the shift to the requested window in one transaction."""
    return await shift_change_service.approve_shift_change_request(
        db, current_user, parse_uuid(request_id, "request ID"), data.manager_notes if data else None
    )


@router.put("/{request_id}/deny", response_model=ShiftChangeRequestResponse)
@handle_endpoint_errors(operation_name="deny_shift_change_request")
async def deny_shift_change_request_endpoint(
    request_id: str,
    data: Optional[ReviewRequest] = None,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await shift_change_service.deny_shift_change_request(
        db, current_user, parse_uuid(request_id, "request ID"), data.manager_notes if data else None
    )
