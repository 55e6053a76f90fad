from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from uuid import UUID
from timeclock.models.shift import ShiftStatus


class ShiftCreate(BaseModel):
    user_id: UUID
    start_time: datetime
    end_time: datetime
    location: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)


class ShiftUpdate(BaseModel):
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    status: Optional[ShiftStatus] = None
    location: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)


class BulkShiftItem(BaseModel):
    """A single row of a bulk import; presence is checked by the scheduler so the error names the row."""
    user_id: Optional[UUID] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = Field(None, max_length=255)
    position: Optional[str] = Field(None, max_length=255)


class BulkShiftCreate(BaseModel):
    shifts: List[BulkShiftItem]


class ShiftResponse(BaseModel):
    id: UUID
    user_id: UUID
    start_time: datetime
    end_time: datetime
    status: ShiftStatus
    location: Optional[str] = None
    position: Optional[str] = None
    created_by_id: Optional[UUID] = None
    created_at: datetime

    class Config:
        from_attributes = True


class BulkShiftResponse(BaseModel):
    created: int
    shifts: List[ShiftResponse]
