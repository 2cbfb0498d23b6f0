"""Job monitoring models."""

from .scheduling import (
    CronSchedule,
    IntervalSchedule,
    OtherSchedule,
    TriggerSchedule,
    JobDefinition,
    ExecutionContext,
    TriggerState,
)
from .job_snapshot import JobSnapshot

__all__ = [
    "CronSchedule",
    "IntervalSchedule",
    "OtherSchedule",
    "TriggerSchedule",
    "JobDefinition",
    "ExecutionContext",
    "TriggerState",
    "JobSnapshot",
]
