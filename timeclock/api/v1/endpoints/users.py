from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from timeclock.core.database import get_db
from timeclock.core.dependencies import get_current_user, get_current_manager, get_current_admin
from timeclock.core.error_handling import handle_endpoint_errors, parse_uuid
from timeclock.models.user import User, UserRole, UserStatus
from timeclock.schemas.user import PinUpdate, UserCreate, UserResponse, UserUpdate
from timeclock.services import user_service

router = APIRouter()


@router.get("/me", response_model=UserResponse)
@handle_endpoint_errors(operation_name="get_me")
async def get_me_endpoint(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_me(db, current_user)


@router.put("/me/pin")
@handle_endpoint_errors(operation_name="update_my_pin")
async def update_my_pin_endpoint(
    data: PinUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.update_my_pin(db, current_user, data.pin)
    return {"message": "PIN updated successfully"}


@router.get("", response_model=List[UserResponse])
@handle_endpoint_errors(operation_name="list_users")
async def list_users_endpoint(
    role: Optional[UserRole] = Query(None),
    status_filter: Optional[UserStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.list_users(db, current_user, role=role, status=status_filter)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
@handle_endpoint_errors(operation_name="create_user")
async def create_user_endpoint(
    data: UserCreate,
    current_user: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.create_user(db, current_user, data)


@router.put("/{user_id}", response_model=UserResponse)
@handle_endpoint_errors(operation_name="update_user")
async def update_user_endpoint(
    user_id: str,
    data: UserUpdate,
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_user(db, current_user, parse_uuid(user_id, "user ID"), data)
