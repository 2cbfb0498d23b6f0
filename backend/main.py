"""FastAPI application entry point."""

import json
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI

from config import settings, SCHEDULING_AVAILABLE


class JSONFormatter(logging.Formatter):
    """JSON log formatter for Railway compatibility."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


# Configure logging - use JSON in production (Railway), plain text locally
log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
handler = logging.StreamHandler()

if os.environ.get("RAILWAY_ENVIRONMENT"):
    # JSON format for Railway
    handler.setFormatter(JSONFormatter())
else:
    # Plain text for local development
    handler.setFormatter(logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))

logging.basicConfig(level=log_level, handlers=[handler])
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup
    logger.info("Starting Job Monitor...")

    if not SCHEDULING_AVAILABLE:
        logger.info("Job monitoring disabled or APScheduler not installed, no jobs will be reported")

    # Use ENABLE_SCHEDULER=true to run the service's own scheduler
    if settings.enable_scheduler and not SCHEDULING_AVAILABLE:
        logger.warning("Scheduler not started: job monitoring disabled or APScheduler not installed")
    elif settings.enable_scheduler:
        try:
            from jobs.scheduler import start_scheduler
            await start_scheduler()
            logger.info("Scheduler started")
        except Exception as e:
            logger.warning(f"Scheduler not started: {e}")
    else:
        logger.info("Scheduler disabled via ENABLE_SCHEDULER=false")

    logger.info("Startup complete")
    yield

    # Shutdown
    logger.info("Shutting down...")
    if settings.enable_scheduler and SCHEDULING_AVAILABLE:
        try:
            from jobs.scheduler import stop_scheduler
            await stop_scheduler()
        except Exception as e:
            logger.warning(f"Scheduler not stopped cleanly: {e}")
    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Job Monitor",
    description="Point-in-time snapshots of scheduled jobs",
    version="1.0.0",
    lifespan=lifespan,
)


# Health check endpoint
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "job-monitor"}


# API info endpoint
@app.get("/api/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Job Monitor API",
        "version": "1.0.0",
        "scheduling_available": SCHEDULING_AVAILABLE,
        "features": [
            "Job snapshots across schedulers",
            "Currently executing jobs",
            "Merged trigger schedules",
        ],
    }


# Include API routers
from api import jobs

app.include_router(jobs.router, prefix="/api/jobs", tags=["Jobs"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
