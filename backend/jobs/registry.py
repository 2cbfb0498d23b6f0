"""Registry of the schedulers living in this process.

APScheduler keeps no process-wide list of schedulers and cannot report
which jobs are currently running, so schedulers that should be monitored
are bound to a SchedulerRegistry. Binding attaches an ExecutionTracker
listener that follows job submissions and completions.
"""

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from apscheduler.events import (
    EVENT_JOB_ERROR,
    EVENT_JOB_EXECUTED,
    EVENT_JOB_MISSED,
    EVENT_JOB_SUBMITTED,
)
from apscheduler.schedulers.base import BaseScheduler

from errors import SchedulerAlreadyBoundError, SchedulerNotFoundError
from jobs.adapter import APSchedulerHandle
from models.scheduling import ExecutionContext

logger = logging.getLogger(__name__)

TRACKED_EVENTS = EVENT_JOB_SUBMITTED | EVENT_JOB_EXECUTED | EVENT_JOB_ERROR | EVENT_JOB_MISSED

# (job store alias, job id)
JobKey = Tuple[str, str]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _Run:
    fire_time: datetime
    pending_run_times: List[datetime] = field(default_factory=list)


class ExecutionTracker:
    """Follows running jobs of one scheduler through its events.

    A submission may carry several scheduled run times (misfired runs that
    were not coalesced); the executor reports each of them separately, so a
    run stays in flight until every one of its run times has been reported
    as executed, failed or missed.

    The scheduler dispatches the submission event only after the executor
    accepted the job, so a fast job may report its completion first. Such
    completions are held until the matching submission arrives.
    """

    def __init__(self, clock: Callable[[], datetime] = utcnow):
        self._clock = clock
        self._lock = threading.Lock()
        self._running: Dict[JobKey, List[_Run]] = {}
        self._finished_early: Dict[JobKey, List[datetime]] = {}
        self._last_fire: Dict[JobKey, datetime] = {}

    def __call__(self, event) -> None:
        key = (event.jobstore, event.job_id)
        if event.code == EVENT_JOB_SUBMITTED:
            self._on_submitted(key, list(event.scheduled_run_times))
        else:
            self._on_finished(key, event.scheduled_run_time)

    def _on_submitted(self, key: JobKey, run_times: List[datetime]) -> None:
        fire_time = self._clock()
        with self._lock:
            if run_times:
                latest = max(run_times)
                previous = self._last_fire.get(key)
                if previous is None or latest > previous:
                    self._last_fire[key] = latest

            pending = list(run_times)
            early = self._finished_early.pop(key, None)
            if early:
                for run_time in early:
                    if run_time in pending:
                        pending.remove(run_time)
                # Submissions of a job arrive in run time order, so older
                # leftovers belong to runs submitted before the tracker saw them
                oldest = min(run_times) if run_times else None
                leftover = [
                    t for t in early
                    if t not in run_times and oldest is not None and t > oldest
                ]
                if leftover:
                    self._finished_early[key] = leftover

            if pending:
                self._running.setdefault(key, []).append(
                    _Run(fire_time=fire_time, pending_run_times=pending)
                )

    def _on_finished(self, key: JobKey, run_time: datetime) -> None:
        with self._lock:
            runs = self._running.get(key, [])
            for run in runs:
                if run_time in run.pending_run_times:
                    run.pending_run_times.remove(run_time)
                    if not run.pending_run_times:
                        runs.remove(run)
                    if not runs:
                        del self._running[key]
                    return

            # Completion reported before its submission
            self._finished_early.setdefault(key, []).append(run_time)

    def executing(self) -> List[ExecutionContext]:
        """Return one context per in-flight run, in submission order per job."""
        with self._lock:
            return [
                ExecutionContext(group=alias, name=job_id, fire_time=run.fire_time)
                for (alias, job_id), runs in self._running.items()
                for run in runs
            ]

    def previous_fire_time(self, alias: str, job_id: str) -> Optional[datetime]:
        """Latest scheduled run time submitted for the job, if any."""
        with self._lock:
            return self._last_fire.get((alias, job_id))


class SchedulerRegistry:
    """Named schedulers of the process, in registration order."""

    def __init__(self):
        self._lock = threading.Lock()
        self._handles: Dict[str, APSchedulerHandle] = {}
        self._counter = 0

    def bind(self, scheduler: BaseScheduler, name: Optional[str] = None) -> APSchedulerHandle:
        """Register a scheduler and start tracking its running jobs."""
        with self._lock:
            self._counter += 1
            name = name or f"scheduler-{self._counter}"
            if name in self._handles:
                raise SchedulerAlreadyBoundError(name)
            tracker = ExecutionTracker()
            scheduler.add_listener(tracker, TRACKED_EVENTS)
            handle = APSchedulerHandle(name, scheduler, tracker)
            self._handles[name] = handle

        logger.info(f"Bound scheduler {name}")
        return handle

    def unbind(self, name: str) -> None:
        """Forget a scheduler and detach its tracker."""
        with self._lock:
            handle = self._handles.pop(name, None)
        if handle is None:
            raise SchedulerNotFoundError(name)
        handle.scheduler.remove_listener(handle.tracker)
        logger.info(f"Unbound scheduler {name}")

    def lookup(self, name: str) -> APSchedulerHandle:
        with self._lock:
            handle = self._handles.get(name)
        if handle is None:
            raise SchedulerNotFoundError(name)
        return handle

    def lookup_all(self) -> List[APSchedulerHandle]:
        with self._lock:
            return list(self._handles.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._handles)


# Registry the service binds its own scheduler to
default_registry = SchedulerRegistry()
