"""Publishing of Job completion events into the cluster event stream."""

from __future__ import annotations

from kubernetes import client

from .. import logging as structured_logging
from .. import metrics
from ..builders.event_builder import build_completion_event
from ..constants import OPERATOR_NAME
from ..models import LogicalOwner, WorkloadJob
from ..utils.completion import JobPhase


class EventEmitter:
    """Publishes completion events on behalf of a GitOpsConfig.

    Publishing is best-effort: failures are logged and counted but never
    raised, since the cluster event store tolerates event loss.
    """

    def __init__(
        self,
        core_api: client.CoreV1Api | None = None,
        source_component: str = OPERATOR_NAME,
    ) -> None:
        self._core_api = core_api
        self._source_component = source_component

    @property
    def core_api(self) -> client.CoreV1Api:
        if self._core_api is None:
            self._core_api = client.CoreV1Api()
        return self._core_api

    def emit(self, owner: LogicalOwner, job: WorkloadJob, outcome: JobPhase) -> None:
        body = build_completion_event(
            owner=owner,
            job=job,
            outcome=outcome,
            source_component=self._source_component,
        )
        reason = body["reason"]
        try:
            self.core_api.create_namespaced_event(namespace=owner.namespace, body=body)
        except Exception as e:
            structured_logging.logger.warning(
                f"Failed to publish completion event: {e}",
                controller=owner.kind,
                resource=f"{owner.namespace}/{owner.name}",
                event="job",
                reason=reason,
                job=job.name,
                error=str(e),
            )
            metrics.COMPLETION_EVENTS_TOTAL.labels(reason=reason, result="error").inc()
            return

        structured_logging.logger.info(
            body["message"],
            controller=owner.kind,
            resource=f"{owner.namespace}/{owner.name}",
            event="job",
            reason=reason,
            job=job.name,
        )
        metrics.COMPLETION_EVENTS_TOTAL.labels(reason=reason, result="success").inc()
