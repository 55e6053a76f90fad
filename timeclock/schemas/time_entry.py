from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID


class ClockInRequest(BaseModel):
    pin: str = ""
    tablet_id: str = ""
    tablet_location: Optional[str] = Field(None, max_length=255)


class ClockOutRequest(BaseModel):
    pin: str = ""


class ManualEntryCreate(BaseModel):
    user_id: UUID
    shift_id: UUID
    clock_in_time: datetime
    clock_out_time: datetime
    note: Optional[str] = Field(None, max_length=500)


class TimeEntryResponse(BaseModel):
    id: UUID
    user_id: UUID
    shift_id: UUID
    clock_in_time: datetime
    clock_out_time: Optional[datetime] = None
    total_hours: Optional[float] = None
    manual_entry: bool
    manual_entry_by_id: Optional[UUID] = None
    manual_entry_note: Optional[str] = None
    tablet_id: Optional[str] = None
    tablet_location: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ClockEventResponse(BaseModel):
    message: str
    user_name: str
    entry: TimeEntryResponse


class TimeEntryListResponse(BaseModel):
    start: datetime
    end: datetime
    entries: list[TimeEntryResponse]
    total_hours: float


class LiveEntryResponse(BaseModel):
    entry_id: UUID
    user_id: UUID
    user_name: str
    shift_id: UUID
    clock_in_time: datetime
    tablet_location: Optional[str] = None
    shift_start: datetime
    shift_end: datetime
