from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from ..constants import (
    ANNOTATION_JOB,
    EVENT_TYPE_NORMAL,
    EVENT_TYPE_WARNING,
    OPERATOR_NAME,
    REASON_JOB_FAILED,
    REASON_JOB_SUCCESSFUL,
)
from ..models import LogicalOwner, WorkloadJob
from ..utils.completion import JobPhase

_OUTCOMES: dict[JobPhase, tuple[str, str, str]] = {
    JobPhase.SUCCEEDED: (EVENT_TYPE_NORMAL, REASON_JOB_SUCCESSFUL, "Job finished successfully: {job}"),
    JobPhase.FAILED: (EVENT_TYPE_WARNING, REASON_JOB_FAILED, "Job failed: {job}"),
}


def build_completion_event(
    *,
    owner: LogicalOwner,
    job: WorkloadJob,
    outcome: JobPhase,
    source_component: str = OPERATOR_NAME,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Render a core/v1 Event manifest attributing a Job completion to its owner.

    This function is pure and safe to unit-test.

    Raises:
        ValueError: if ``outcome`` is not a terminal phase.
    """
    try:
        type_, reason, template = _OUTCOMES[outcome]
    except KeyError:
        raise ValueError(f"no completion event for Job phase {outcome.value}") from None

    timestamp = (now or datetime.now(UTC)).strftime("%Y-%m-%dT%H:%M:%SZ")
    return {
        "apiVersion": "v1",
        "kind": "Event",
        "metadata": {
            "generateName": f"{owner.name}.",
            "namespace": owner.namespace,
            "annotations": {ANNOTATION_JOB: job.name},
        },
        "involvedObject": {
            "kind": owner.kind,
            "apiVersion": owner.api_version,
            "name": owner.name,
            "namespace": owner.namespace,
        },
        "type": type_,
        "reason": reason,
        "message": template.format(job=job.name),
        "source": {"component": source_component},
        "reportingComponent": source_component,
        "firstTimestamp": timestamp,
        "lastTimestamp": timestamp,
        "count": 1,
    }
