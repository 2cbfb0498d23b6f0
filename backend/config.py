"""Application configuration from environment variables."""

import importlib.util

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Job monitoring
    enable_job_monitoring: bool = True  # Set ENABLE_JOB_MONITORING=false to report no jobs
    host_address: Optional[str] = None  # Overrides the resolved host address in global job ids

    # Service scheduler settings
    enable_scheduler: bool = False  # Set ENABLE_SCHEDULER=true to run the service's own scheduler
    snapshot_log_interval_minutes: int = 5
    jobstore_url: Optional[str] = None  # SQLAlchemy URL for a persistent job store

    # Logging
    log_level: str = "INFO"

    # Jobs endpoint access control
    enable_jobs_api: bool = True  # Set ENABLE_JOBS_API=false to disable

    class Config:
        env_file = ".env"
        case_sensitive = False


def is_apscheduler_available() -> bool:
    """Check whether the scheduling library can be imported in this process."""
    return importlib.util.find_spec("apscheduler") is not None


settings = Settings()

# Computed once at startup and passed into the snapshot builder
SCHEDULING_AVAILABLE = settings.enable_job_monitoring and is_apscheduler_available()
