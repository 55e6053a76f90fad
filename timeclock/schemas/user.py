from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from uuid import UUID
from timeclock.models.user import UserRole, UserStatus


class UserCreate(BaseModel):
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    role: UserRole = UserRole.EMPLOYEE
    pin: Optional[str] = None
    hourly_rate: Optional[float] = Field(None, ge=0)


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
    hourly_rate: Optional[float] = Field(None, ge=0)
    pin: Optional[str] = None  # "" clears the PIN


class PinUpdate(BaseModel):
    pin: str


class UserResponse(BaseModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    role: UserRole
    status: UserStatus
    has_pin: bool
    pin_changed_at: Optional[datetime] = None
    hourly_rate: Optional[float] = None
    created_at: datetime

    class Config:
        from_attributes = True
