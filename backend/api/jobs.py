"""Scheduled jobs API.

Exposes the job snapshots of every scheduler bound to the registry.
Protected by ENABLE_JOBS_API env var.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

import config
from errors import SnapshotBuildError
from jobs.snapshots import build_all_snapshots
from models.job_snapshot import JobSnapshot

logger = logging.getLogger(__name__)

router = APIRouter()


class JobsSummary(BaseModel):
    """Counts over one poll of all schedulers."""

    scheduling_available: bool
    schedulers: int
    jobs: int
    executing: int
    paused: int


def get_registry():
    """Dependency for the scheduler registry (overridden in tests).

    The registry depends on APScheduler, so it is only imported when
    scheduling is available; otherwise polls short-circuit without it.
    """
    if not config.SCHEDULING_AVAILABLE:
        return None
    from jobs.registry import default_registry

    return default_registry


def get_scheduling_available() -> bool:
    """Dependency for the startup-time scheduling capability flag."""
    return config.SCHEDULING_AVAILABLE


def poll_snapshots(registry, scheduling_available: bool) -> List[JobSnapshot]:
    """Run one poll, turning a failed poll into an HTTP 500."""
    if not config.settings.enable_jobs_api:
        raise HTTPException(status_code=404, detail="Jobs endpoint is disabled")

    try:
        return build_all_snapshots(registry, scheduling_available=scheduling_available)
    except SnapshotBuildError as e:
        logger.error(f"Job snapshot poll failed: {e}")
        raise HTTPException(status_code=500, detail=f"Job snapshot poll failed: {e.message}")


@router.get("", response_model=List[JobSnapshot])
def list_jobs(
    group: Optional[str] = Query(None, description="Only jobs of this group"),
    executing_only: bool = Query(False, description="Only jobs currently executing"),
    registry=Depends(get_registry),
    scheduling_available: bool = Depends(get_scheduling_available),
):
    """List a snapshot of every scheduled job.

    Snapshots are ordered by scheduler, then by catalog order.
    """
    snapshots = poll_snapshots(registry, scheduling_available)
    if group is not None:
        snapshots = [s for s in snapshots if s.group == group]
    if executing_only:
        snapshots = [s for s in snapshots if s.currently_executing]
    return snapshots


@router.get("/summary", response_model=JobsSummary)
def get_jobs_summary(
    registry=Depends(get_registry),
    scheduling_available: bool = Depends(get_scheduling_available),
):
    """Get job counts across all schedulers."""
    snapshots = poll_snapshots(registry, scheduling_available)
    return JobsSummary(
        scheduling_available=scheduling_available,
        schedulers=len(registry) if scheduling_available and registry is not None else 0,
        jobs=len(snapshots),
        executing=sum(1 for s in snapshots if s.currently_executing),
        paused=sum(1 for s in snapshots if s.paused),
    )


@router.get("/{global_job_id}", response_model=JobSnapshot)
def get_job(
    global_job_id: str,
    registry=Depends(get_registry),
    scheduling_available: bool = Depends(get_scheduling_available),
):
    """Get the snapshot of one job by its global id."""
    snapshots = poll_snapshots(registry, scheduling_available)
    for snapshot in snapshots:
        if snapshot.global_job_id == global_job_id:
            return snapshot
    raise HTTPException(status_code=404, detail="Job not found")
