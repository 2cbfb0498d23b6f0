"""Tests for scheduler enumeration."""

import logging
from datetime import timedelta

from jobs.enumerator import list_executing_contexts, list_jobs, list_schedulers
from models.scheduling import ExecutionContext, JobDefinition


def test_list_schedulers_keeps_registry_order(make_scheduler, make_registry):
    first, second = make_scheduler("first"), make_scheduler("second")

    assert list_schedulers(make_registry(first, second)) == [first, second]


def test_list_schedulers_empty_registry(make_registry):
    assert list_schedulers(make_registry()) == []


def test_executing_contexts_keyed_by_full_name(make_scheduler, now):
    running = ExecutionContext(group="grp", name="job1", fire_time=now)
    scheduler = make_scheduler("A", executing=[running])

    contexts = list_executing_contexts(scheduler)

    assert contexts == {"grp.job1": running}


def test_executing_contexts_last_instance_wins(make_scheduler, now):
    """Several running instances of one job collapse to the last one."""
    older = ExecutionContext(group="grp", name="job1", fire_time=now - timedelta(seconds=30))
    newer = ExecutionContext(group="grp", name="job1", fire_time=now - timedelta(seconds=1))
    other = ExecutionContext(group="etl", name="job1", fire_time=now)
    scheduler = make_scheduler("A", executing=[older, other, newer])

    contexts = list_executing_contexts(scheduler)

    assert list(contexts) == ["grp.job1", "etl.job1"]
    assert contexts["grp.job1"] is newer


def test_list_jobs_returns_catalog(make_scheduler, sample_job):
    other = JobDefinition(group="grp", name="job2", job_class_name="x:y")
    scheduler = make_scheduler("A", jobs=[sample_job, other])

    assert list_jobs(scheduler) == [sample_job, other]


def test_list_jobs_swallows_catalog_failure(make_scheduler, caplog):
    """A failing job store should yield no jobs and a warning."""
    scheduler = make_scheduler("B", jobs_error=ConnectionError("job store unreachable"))

    with caplog.at_level(logging.WARNING, logger="jobs.enumerator"):
        jobs = list_jobs(scheduler)

    assert jobs == []
    assert len(caplog.records) == 1
    record = caplog.records[0]
    assert record.levelno == logging.WARNING
    assert "B" in record.getMessage()
    assert "job store unreachable" in record.getMessage()
    assert record.exc_info is not None
