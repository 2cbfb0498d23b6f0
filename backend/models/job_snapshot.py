"""Point-in-time snapshot of one scheduled job.

A snapshot is built once per poll from live scheduler state and never
changes afterwards, so it can be shared between threads and handed to an
exporter without copying. Instances serialize to JSON for transport to a
remote collector.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class JobSnapshot(BaseModel):
    """State of a job at the instant it was observed."""

    model_config = ConfigDict(frozen=True)

    group: str
    name: str
    description: Optional[str] = None
    job_class_name: str

    # Aggregated over all triggers of the job
    previous_fire_time: Optional[datetime] = None
    next_fire_time: Optional[datetime] = None

    # -1 when the job is not running
    elapsed_time_ms: int = -1

    # -1 unless the job has a fixed-interval trigger
    repeat_interval_ms: int = -1
    cron_expression: Optional[str] = None
    paused: bool = True

    global_job_id: str

    @property
    def currently_executing(self) -> bool:
        """Whether the job was running when the snapshot was taken."""
        return self.elapsed_time_ms >= 0

    def __str__(self) -> str:
        return f"{type(self).__name__}[name={self.name}, group={self.group}]"
