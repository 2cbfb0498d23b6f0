"""Enumerates schedulers, their running jobs and their job catalogs."""

import logging
from typing import Dict, List

from models.scheduling import ExecutionContext, JobDefinition

logger = logging.getLogger(__name__)


def list_schedulers(registry) -> list:
    """All schedulers bound to the registry, in registration order."""
    return list(registry.lookup_all())


def list_executing_contexts(scheduler) -> Dict[str, ExecutionContext]:
    """Map "group.name" to the context of the job's in-flight run.

    When a job runs several instances at once, the last one reported wins.
    """
    contexts: Dict[str, ExecutionContext] = {}
    for context in scheduler.executing_contexts():
        contexts[context.full_name] = context
    return contexts


def list_jobs(scheduler) -> List[JobDefinition]:
    """Job catalog of one scheduler, or an empty list if it can't be read.

    A job store backed by a database raises while the database is down;
    the failure is logged so the other schedulers can still be reported.
    """
    try:
        return list(scheduler.jobs())
    except Exception as e:
        logger.warning(f"Could not list jobs of scheduler {scheduler.name}: {e}", exc_info=True)
        return []
