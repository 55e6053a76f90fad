from fastapi import APIRouter, Depends, status as http_status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timezone
import logging
import time

from timeclock.core.config import settings
from timeclock.core.database import get_db

router = APIRouter()
logger = logging.getLogger(__name__)

# Track server startup time for uptime calculation
SERVER_START_TIME = time.time()


@router.get("/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Liveness plus a database ping.

    Returns:
        - 200 OK: Service is healthy
        - 503 Service Unavailable: database unreachable
    """
    health_status = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime_seconds": round(time.time() - SERVER_START_TIME, 2),
        "environment": settings.ENVIRONMENT,
        "database": "connected",
    }
    http_code = http_status.HTTP_200_OK

    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError):
        logger.error("Database connection error in health check", exc_info=True)
        health_status["status"] = "unhealthy"
        health_status["database"] = "disconnected"
        http_code = http_status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(status_code=http_code, content=health_status)
