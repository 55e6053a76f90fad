from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from timeclock.core.database import get_db
from timeclock.core.dependencies import get_current_user, get_current_manager
from timeclock.core.error_handling import handle_endpoint_errors, parse_uuid
from timeclock.models.user import User
from timeclock.schemas.requests import (
    ReviewRequest,
    TimeOffRequestCreate,
    TimeOffRequestResponse,
)
from timeclock.services import time_off_service

router = APIRouter()


@router.post("", response_model=TimeOffRequestResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_time_off_request")
async def create_time_off_request_endpoint(
    data: TimeOffRequestCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Submit a time-off request; managers are notified."""
    return await time_off_service.create_time_off_request(db, current_user, data)


@router.get("/my", response_model=List[TimeOffRequestResponse])
@handle_endpoint_errors(operation_name="list_my_time_off_requests")
async def list_my_time_off_requests_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await time_off_service.list_my_time_off_requests(db, current_user)


@router.get("/pending", response_model=List[TimeOffRequestResponse])
@handle_endpoint_errors(operation_name="list_pending_time_off_requests")
async def list_pending_time_off_requests_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await time_off_service.list_pending_time_off_requests(db, current_user)


@router.put("/{request_id}/approve", response_model=TimeOffRequestResponse)
@handle_endpoint_errors(operation_name="approve_time_off_request")
async def approve_time_off_request_endpoint(
    request_id: str,
    data: Optional[ReviewRequest] = None,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await time_off_service.approve_time_off_request(
        db, current_user, parse_uuid(request_id, "request ID"), data.manager_notes if data else None
    )


@router.put("/{request_id}/deny", response_model=TimeOffRequestResponse)
@handle_endpoint_errors(operation_name="deny_time_off_request")
async def deny_time_off_request_endpoint(
    request_id: str,
    data: Optional[ReviewRequest] = None,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await time_off_service.deny_time_off_request(
        db, current_user, parse_uuid(request_id, "request ID"), data.manager_notes if data else None
    )
