"""
Report Schemas

Read-side rollups; every figure is derived from persisted time entries.
"""
from pydantic import BaseModel
from typing import List
from datetime import datetime
from uuid import UUID

from timeclock.schemas.time_entry import TimeEntryResponse


class EmployeeHours(BaseModel):
    user_id: UUID
    name: str
    email: str
    total_hours: float
    entry_count: int


class WeeklyHoursReport(BaseModel):
    start: datetime
    end: datetime
    employees: List[EmployeeHours]
    total_hours: float


class EmployeeLaborCost(BaseModel):
    user_id: UUID
    name: str
    email: str
    total_hours: float
    hourly_rate: float
    total_cost: float


class LaborCostReport(BaseModel):
    start: datetime
    end: datetime
    employees: List[EmployeeLaborCost]
    total_hours: float
    total_cost: float


class DashboardStats(BaseModel):
    currently_clocked_in: int
    todays_shifts: int
    pending_time_off_requests: int
    pending_shift_change_requests: int
    this_week_hours: float
    active_employees: int


class EmployeeHistory(BaseModel):
    user_id: UUID
    name: str
    entries: List[TimeEntryResponse]
    total_hours: float
