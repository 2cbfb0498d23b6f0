"""Centralized exception hierarchy for the Job Monitor.

Provides a structured exception hierarchy for consistent error handling
across the application. All exceptions inherit from JobMonitorError.
"""


class JobMonitorError(Exception):
    """Base exception for all Job Monitor errors."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class SnapshotBuildError(JobMonitorError):
    """A poll cycle failed; no partial snapshot list is returned."""

    def __init__(self, message: str, scheduler: str = None):
        super().__init__(message, {"scheduler": scheduler})
        self.scheduler = scheduler


class SchedulerAlreadyBoundError(JobMonitorError):
    """A scheduler with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Scheduler already bound: {name}", {"name": name})
        self.name = name


class SchedulerNotFoundError(JobMonitorError):
    """No scheduler is registered under the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Scheduler not found: {name}", {"name": name})
        self.name = name


class ConfigurationError(JobMonitorError):
    """Invalid or missing configuration."""

    def __init__(self, message: str, setting: str = None):
        super().__init__(message, {"setting": setting})
        self.setting = setting
