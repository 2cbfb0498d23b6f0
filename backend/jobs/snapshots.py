"""Builds immutable job snapshots from live scheduler state.

Each call re-reads every scheduler; nothing is cached between polls. A
snapshot merges all triggers of a job:

- next fire time is the earliest among the triggers, previous fire time
  the latest (triggers without a value are ignored)
- cron expression and repeat interval come from the last trigger of that
  kind in enumeration order
- the job is paused only when every trigger is paused, so a job without
  triggers is reported as paused
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional

from errors import SnapshotBuildError
from jobs.enumerator import list_executing_contexts, list_jobs, list_schedulers
from jobs.identity import build_global_job_id, get_host_address, get_process_id
from models.job_snapshot import JobSnapshot
from models.scheduling import ExecutionContext, JobDefinition, TriggerState

logger = logging.getLogger(__name__)


def earliest_next_fire_time(triggers: Iterable[TriggerState]) -> Optional[datetime]:
    times = [t.next_fire_time for t in triggers if t.next_fire_time is not None]
    return min(times) if times else None


def latest_previous_fire_time(triggers: Iterable[TriggerState]) -> Optional[datetime]:
    times = [t.previous_fire_time for t in triggers if t.previous_fire_time is not None]
    return max(times) if times else None


def elapsed_ms(context: Optional[ExecutionContext], now: datetime) -> int:
    if context is None:
        return -1
    return (now - context.fire_time) // timedelta(milliseconds=1)


def build_snapshot(
    job: JobDefinition,
    execution_context: Optional[ExecutionContext],
    triggers: List[TriggerState],
    *,
    process_id: str,
    host_address: str,
    now: datetime,
) -> JobSnapshot:
    """Build the snapshot of one job.

    Args:
        job: Static definition from the scheduler's catalog.
        execution_context: In-flight run of the job, or None if it is idle.
        triggers: Every trigger of the job on its scheduler.
        process_id: Id of this process, part of the global job id.
        host_address: Address of this host, part of the global job id.
        now: Instant the snapshot is taken at.
    """
    cron = None
    repeat_interval = -1
    paused = True
    for trigger in triggers:
        schedule = trigger.schedule
        if schedule.kind == "cron":
            cron = schedule.expression
        elif schedule.kind == "interval":
            repeat_interval = schedule.interval_ms
        paused = paused and trigger.paused

    return JobSnapshot(
        group=job.group,
        name=job.name,
        description=job.description,
        job_class_name=job.job_class_name,
        previous_fire_time=latest_previous_fire_time(triggers),
        next_fire_time=earliest_next_fire_time(triggers),
        elapsed_time_ms=elapsed_ms(execution_context, now),
        repeat_interval_ms=repeat_interval,
        cron_expression=cron,
        paused=paused,
        global_job_id=build_global_job_id(job.full_name, process_id, host_address),
    )


def build_all_snapshots(
    registry,
    *,
    scheduling_available: bool,
    now: Optional[datetime] = None,
    process_id: Optional[str] = None,
    host_address: Optional[str] = None,
) -> List[JobSnapshot]:
    """Snapshot every job of every bound scheduler.

    Snapshots are ordered by scheduler, then by each scheduler's catalog
    order. A scheduler whose catalog can't be read contributes no jobs;
    any other failure aborts the whole poll.

    Raises:
        SnapshotBuildError: if reading a scheduler or building a snapshot
            fails. No partial result is returned.
    """
    if not scheduling_available:
        return []

    now = now or datetime.now(timezone.utc)
    process_id = process_id or get_process_id()
    host_address = host_address or get_host_address()

    snapshots = []
    scheduler_name = None
    try:
        for scheduler in list_schedulers(registry):
            scheduler_name = scheduler.name
            executing = list_executing_contexts(scheduler)
            for job in list_jobs(scheduler):
                snapshots.append(
                    build_snapshot(
                        job,
                        executing.get(job.full_name),
                        scheduler.triggers_of_job(job, now=now),
                        process_id=process_id,
                        host_address=host_address,
                        now=now,
                    )
                )
    except Exception as e:
        raise SnapshotBuildError(f"Job snapshot poll failed: {e}", scheduler=scheduler_name) from e

    logger.debug(f"Built {len(snapshots)} job snapshots")
    return snapshots
