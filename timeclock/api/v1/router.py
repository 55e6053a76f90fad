from fastapi import APIRouter
from timeclock.api.v1.endpoints import (
    clock,
    health,
    notifications,
    reports,
    shift_changes,
    shifts,
    time_off,
    users,
)

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(clock.router, prefix="/clock", tags=["clock"])
api_router.include_router(shifts.router, prefix="/shifts", tags=["shifts"])
api_router.include_router(time_off.router, prefix="/time-off-requests", tags=["time-off"])
api_router.include_router(shift_changes.router, prefix="/shift-change-requests", tags=["shift-changes"])
api_router.include_router(reports.router, prefix="/reports", tags=["reports"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])
