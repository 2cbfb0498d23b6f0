"""Pytest fixtures for test suite."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from httpx import AsyncClient, ASGITransport

# Add backend to path for imports
backend_path = Path(__file__).parent.parent
sys.path.insert(0, str(backend_path))

from models.scheduling import (  # noqa: E402
    CronSchedule,
    ExecutionContext,
    IntervalSchedule,
    JobDefinition,
    OtherSchedule,
    TriggerState,
)

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeScheduler:
    """Scheduler handle with fixed contents.

    Args:
        name: Scheduler name.
        jobs: Catalog, in order.
        triggers: Trigger states by job full name (missing = no triggers).
        executing: In-flight execution contexts.
        jobs_error: Raised by jobs() when set.
        triggers_error: Raised by triggers_of_job() when set.
    """

    def __init__(self, name, jobs=None, triggers=None, executing=None,
                 jobs_error=None, triggers_error=None):
        self.name = name
        self._jobs = jobs or []
        self._triggers = triggers or {}
        self._executing = executing or []
        self._jobs_error = jobs_error
        self._triggers_error = triggers_error

    def executing_contexts(self):
        return list(self._executing)

    def jobs(self):
        if self._jobs_error:
            raise self._jobs_error
        return list(self._jobs)

    def triggers_of_job(self, job, now=None):
        if self._triggers_error:
            raise self._triggers_error
        return list(self._triggers.get(job.full_name, []))


class FakeRegistry:
    """Registry holding a fixed list of scheduler handles."""

    def __init__(self, *schedulers):
        self._schedulers = list(schedulers)

    def lookup_all(self):
        return list(self._schedulers)

    def __len__(self):
        return len(self._schedulers)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def sample_job():
    """A job definition in group "grp"."""
    return JobDefinition(
        group="grp",
        name="job1",
        description="Hourly report",
        job_class_name="reports.jobs:hourly_report",
    )


@pytest.fixture
def cron_trigger():
    return TriggerState(
        schedule=CronSchedule(expression="0 0 * * * ?"),
        previous_fire_time=NOW - timedelta(hours=1),
        next_fire_time=NOW + timedelta(hours=1),
        paused=False,
    )


@pytest.fixture
def interval_trigger():
    return TriggerState(
        schedule=IntervalSchedule(interval_ms=300000),
        previous_fire_time=NOW - timedelta(minutes=2),
        next_fire_time=NOW + timedelta(minutes=3),
        paused=False,
    )


@pytest.fixture
def other_trigger():
    return TriggerState(schedule=OtherSchedule(), paused=True)


@pytest.fixture
def make_scheduler():
    """Factory for FakeScheduler handles."""
    return FakeScheduler


@pytest.fixture
def make_registry():
    """Factory for FakeRegistry instances."""
    return FakeRegistry


@pytest.fixture
def scenario_registry(sample_job, cron_trigger):
    """Scheduler A runs grp.job1 (cron, started 5s ago); scheduler B can't list jobs."""
    scheduler_a = FakeScheduler(
        "A",
        jobs=[sample_job],
        triggers={sample_job.full_name: [cron_trigger]},
        executing=[
            ExecutionContext(group="grp", name="job1", fire_time=NOW - timedelta(milliseconds=5000)),
        ],
    )
    scheduler_b = FakeScheduler("B", jobs_error=ConnectionError("job store unreachable"))
    return FakeRegistry(scheduler_a, scheduler_b)


@pytest.fixture
async def test_client():
    """Create a test HTTP client for API testing.

    The registry and capability flag are overridden per test through
    app.dependency_overrides.
    """
    from main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
