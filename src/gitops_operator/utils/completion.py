"""Classification of Job pod counts and detection of terminal transitions."""

from __future__ import annotations

import enum

from ..models import WorkloadJob


class JobPhase(str, enum.Enum):
    ACTIVE = "Active"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    INDETERMINATE = "Indeterminate"


def classify_job(job: WorkloadJob) -> JobPhase:
    """Derive the phase of a Job from its pod counts.

    A Job succeeds when exactly one pod succeeded, even if earlier pods
    failed on intermittent issues.
    """
    if job.active > 0:
        return JobPhase.ACTIVE
    if job.succeeded == 1:
        return JobPhase.SUCCEEDED
    if job.succeeded > 1:
        # Multiple completion records are not reported
        return JobPhase.INDETERMINATE
    if job.failed > 0:
        return JobPhase.FAILED
    return JobPhase.INDETERMINATE


def is_already_completed(job: WorkloadJob) -> bool:
    """True when the Job had already reached an outcome."""
    return job.active == 0 and job.succeeded + job.failed >= 1


def detect_completion(old: WorkloadJob | None, new: WorkloadJob | None) -> JobPhase | None:
    """Decide whether the change from ``old`` to ``new`` is a terminal transition.

    Returns ``JobPhase.SUCCEEDED`` or ``JobPhase.FAILED`` when a completion
    should be reported, None otherwise. A missing ``old`` (first observation)
    is always evaluated on ``new`` alone; a missing ``new`` (deletion) never
    reports.
    """
    if new is None:
        return None
    if new.active > 0:
        return None
    if old is not None and is_already_completed(old):
        return None

    phase = classify_job(new)
    if phase in (JobPhase.SUCCEEDED, JobPhase.FAILED):
        return phase
    return None
