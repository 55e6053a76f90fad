from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from uuid import UUID
from timeclock.models.requests import RequestStatus, TimeOffType


class TimeOffRequestCreate(BaseModel):
    start_date: date
    end_date: date
    type: TimeOffType
    reason: Optional[str] = Field(None, max_length=1000)


class ShiftChangeRequestCreate(BaseModel):
    original_shift_id: UUID
    requested_start_time: datetime
    requested_end_time: datetime
    reason: Optional[str] = Field(None, max_length=1000)


class ReviewRequest(BaseModel):
    manager_notes: Optional[str] = Field(None, max_length=1000)


class TimeOffRequestResponse(BaseModel):
    id: UUID
    user_id: UUID
    start_date: date
    end_date: date
    type: TimeOffType
    reason: Optional[str] = None
    status: RequestStatus
    reviewed_by_id: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    manager_notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ShiftChangeRequestResponse(BaseModel):
    id: UUID
    user_id: UUID
    original_shift_id: UUID
    requested_start_time: datetime
    requested_end_time: datetime
    reason: Optional[str] = None
    status: RequestStatus
    reviewed_by_id: Optional[UUID] = None
    reviewed_at: Optional[datetime] = None
    manager_notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
