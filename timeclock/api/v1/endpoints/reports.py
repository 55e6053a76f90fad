from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from datetime import datetime

from timeclock.core.database import get_db
from timeclock.core.dependencies import get_current_manager
from timeclock.core.error_handling import handle_endpoint_errors, parse_uuid
from timeclock.models.user import User
from timeclock.schemas.report import (
    DashboardStats,
    EmployeeHistory,
    LaborCostReport,
    WeeklyHoursReport,
)
from timeclock.services import report_service

router = APIRouter()


@router.get("/weekly-hours", response_model=WeeklyHoursReport)
@handle_endpoint_errors(operation_name="weekly_hours_report")
async def weekly_hours_report_endpoint(
    start: Optional[datetime] = Query(None, description="Defaults to the current week when start or end is missing"),
    end: Optional[datetime] = Query(None),
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.weekly_hours_report(db, current_user, start=start, end=end)


@router.get("/labor-cost", response_model=LaborCostReport)
@handle_endpoint_errors(operation_name="labor_cost_report")
async def labor_cost_report_endpoint(
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    hourly_rate: Optional[float] = Query(None, description="Overrides every employee's rate"),
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.labor_cost_report(db, current_user, start, end, hourly_rate=hourly_rate)


@router.get("/dashboard-stats", response_model=DashboardStats)
@handle_endpoint_errors(operation_name="dashboard_stats")
async def dashboard_stats_endpoint(
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.dashboard_stats(db, current_user)


@router.get("/employee/{user_id}/history", response_model=EmployeeHistory)
@handle_endpoint_errors(operation_name="employee_history")
async def employee_history_endpoint(
    user_id: str,
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    current_user: User = Depends(get_current_manager),
    db: AsyncSession = Depends(get_db),
):
    return await report_service.employee_history(
        db,
        current_user,
        parse_uuid(user_id, "user ID"),
        start=start,
        end=end,
        limit=limit,
    )
