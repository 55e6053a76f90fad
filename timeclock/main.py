from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import time
import logging

from timeclock.core.config import settings
from timeclock.core.database import engine
from timeclock.core.error_handling import (
    app_error_handler,
    http_error_handler,
    unhandled_error_handler,
    validation_exception_handler,
)
from timeclock.core.exceptions import AppError
from timeclock.core.logging_config import setup_logging
from timeclock.api.v1.router import api_router

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)
access_logger = logging.getLogger("access")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Time Clock API server...")
    yield
    # Shutdown
    logger.info("Shutting down Time Clock API server...")
    await engine.dispose()


app = FastAPI(
    title="Time Clock API",
    description="Kiosk clock-in/clock-out, shift scheduling and request approval API",
    version="1.0.0",
    lifespan=lifespan,
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    try:
        response = await call_next(request)

        process_time = time.time() - start_time
        access_logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Duration: {process_time:.3f}s - "
            f"Client: {request.client.host if request.client else 'unknown'}"
        )
        return response
    except Exception:
        process_time = time.time() - start_time
        logger.error(
            f"Unhandled exception in {request.method} {request.url.path}",
            exc_info=True,
            extra={
                "method": request.method,
                "path": str(request.url.path),
                "duration": f"{process_time:.3f}s",
            }
        )
        # Re-raise to let FastAPI handle it
        raise


# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Error envelope: {"detail": ..., "kind": ...}
app.add_exception_handler(AppError, app_error_handler)
# Starlette base class so routing 404s and 405s get the envelope too
app.add_exception_handler(StarletteHTTPException, http_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_error_handler)

# Include routers
app.include_router(api_router, prefix="/api/v1")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
