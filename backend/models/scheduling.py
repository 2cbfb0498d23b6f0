"""Scheduler-neutral shapes consumed by the snapshot builder.

The APScheduler adapter converts native jobs, triggers and running
executions into these models, so the builder never inspects scheduler
types directly.
"""

from datetime import datetime
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CronSchedule(BaseModel):
    """Calendar-style trigger."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["cron"] = "cron"
    expression: str


class IntervalSchedule(BaseModel):
    """Fixed-interval trigger, repeating every interval_ms milliseconds."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["interval"] = "interval"
    interval_ms: int


class OtherSchedule(BaseModel):
    """Any other trigger (one-shot dates, custom triggers)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["other"] = "other"


TriggerSchedule = Annotated[
    Union[CronSchedule, IntervalSchedule, OtherSchedule],
    Field(discriminator="kind"),
]


def full_job_name(group: str, name: str) -> str:
    """Composite identity of a job, unique across groups of one scheduler."""
    return f"{group}.{name}"


class JobDefinition(BaseModel):
    """Static definition of a job in a scheduler's catalog."""

    model_config = ConfigDict(frozen=True)

    group: str
    name: str
    description: Optional[str] = None
    job_class_name: str

    @property
    def full_name(self) -> str:
        return full_job_name(self.group, self.name)


class ExecutionContext(BaseModel):
    """A run of a job that is currently executing."""

    model_config = ConfigDict(frozen=True)

    group: str
    name: str
    fire_time: datetime

    @property
    def full_name(self) -> str:
        return full_job_name(self.group, self.name)


class TriggerState(BaseModel):
    """One trigger of a job, as observed on its scheduler."""

    model_config = ConfigDict(frozen=True)

    schedule: TriggerSchedule
    previous_fire_time: Optional[datetime] = None
    next_fire_time: Optional[datetime] = None
    paused: bool = False
