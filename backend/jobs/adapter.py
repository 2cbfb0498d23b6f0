"""APScheduler adapter.

Maps APScheduler jobs and triggers onto the scheduler-neutral models the
snapshot builder works with. Combined triggers (OrTrigger/AndTrigger) are
reported as their member triggers, which is how a single APScheduler job
ends up with several triggers.
"""

from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from apscheduler.job import Job
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.combining import BaseCombiningTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from models.scheduling import (
    CronSchedule,
    ExecutionContext,
    IntervalSchedule,
    JobDefinition,
    OtherSchedule,
    TriggerSchedule,
    TriggerState,
)

# Group reported for a pending job whose target job store is unknown
PENDING_GROUP = "default"

CRON_FIELD_ORDER = ("second", "minute", "hour", "day", "month", "day_of_week")

_UNSET = object()


def flatten_trigger(trigger: BaseTrigger) -> List[BaseTrigger]:
    """Expand combined triggers into their members, depth first."""
    if isinstance(trigger, BaseCombiningTrigger):
        members = []
        for member in trigger.triggers:
            members.extend(flatten_trigger(member))
        return members
    return [trigger]


def cron_expression(trigger: CronTrigger) -> str:
    """Render a cron trigger as "second minute hour day month day_of_week [year]"."""
    fields = {f.name: str(f) for f in trigger.fields}
    parts = [fields[name] for name in CRON_FIELD_ORDER]
    if fields.get("year", "*") != "*":
        parts.append(fields["year"])
    return " ".join(parts)


def describe_trigger(trigger: BaseTrigger) -> TriggerSchedule:
    """Classify a native trigger into the closed set of schedule kinds."""
    if isinstance(trigger, CronTrigger):
        return CronSchedule(expression=cron_expression(trigger))
    if isinstance(trigger, IntervalTrigger):
        return IntervalSchedule(interval_ms=trigger.interval // timedelta(milliseconds=1))
    return OtherSchedule()


def job_class_name(job: Job) -> str:
    """Textual reference of the callable a job runs."""
    if job.func_ref:
        return job.func_ref
    func = job.func
    module = getattr(func, "__module__", None)
    qualname = getattr(func, "__qualname__", None) or type(func).__qualname__
    return f"{module}:{qualname}" if module else qualname


class APSchedulerHandle:
    """Read-only view of one bound APScheduler scheduler."""

    def __init__(self, name: str, scheduler: BaseScheduler, tracker):
        self.name = name
        self.scheduler = scheduler
        self.tracker = tracker

    def __repr__(self) -> str:
        return f"<APSchedulerHandle(name='{self.name}')>"

    def executing_contexts(self) -> List[ExecutionContext]:
        return self.tracker.executing()

    def jobs(self) -> List[JobDefinition]:
        """Full job catalog of the scheduler.

        Job store errors (e.g. an unreachable database behind a
        SQLAlchemyJobStore) propagate to the caller.
        """
        pending_aliases = self._pending_aliases()
        return [
            self._to_definition(job, pending_aliases.get(id(job)))
            for job in self.scheduler.get_jobs()
        ]

    def _pending_aliases(self) -> Dict[int, str]:
        """Target job store of each job waiting for the scheduler to start."""
        pending = getattr(self.scheduler, "_pending_jobs", None) or []
        return {id(job): alias for job, alias, _replace_existing in pending}

    def triggers_of_job(self, job: JobDefinition, now: Optional[datetime] = None) -> List[TriggerState]:
        """Current state of every trigger of a job.

        Returns an empty list when the job was removed since the catalog
        was read.
        """
        native = self.scheduler.get_job(job.name, jobstore=job.group)
        if native is None:
            return []

        now = now or datetime.now(timezone.utc)
        next_run_time = getattr(native, "next_run_time", _UNSET)
        paused = next_run_time is None
        previous = self.tracker.previous_fire_time(job.group, job.name)
        members = flatten_trigger(native.trigger)

        states = []
        for member in members:
            if paused:
                next_fire = None
            elif len(members) == 1 and next_run_time is not _UNSET:
                next_fire = next_run_time
            else:
                next_fire = member.get_next_fire_time(None, now)
            states.append(
                TriggerState(
                    schedule=describe_trigger(member),
                    previous_fire_time=previous,
                    next_fire_time=next_fire,
                    paused=paused,
                )
            )
        return states

    @staticmethod
    def _to_definition(job: Job, pending_alias: Optional[str] = None) -> JobDefinition:
        return JobDefinition(
            group=job._jobstore_alias or pending_alias or PENDING_GROUP,
            name=job.id,
            description=job.name,
            job_class_name=job_class_name(job),
        )
