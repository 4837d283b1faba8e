"""Per-notification pipeline: detect a terminal transition, attribute it, report it."""

from __future__ import annotations

from .. import logging as structured_logging
from .. import metrics
from ..errors import NotAJobError, OwnerLookupError
from ..models import JobNotification, WorkloadJob
from ..utils.completion import JobPhase, detect_completion
from .events import EventEmitter
from .ownership import OwnershipResolver


class JobCompletionHandler:
    """Watch handler emitting JobSuccessful/JobFailed events for GitOpsConfig-owned Jobs.

    For an event to be emitted the new Job snapshot must:
     - be owned by a GitOpsConfig, directly or through a CronJob,
     - have no active pods,
     - not have been completed already in the old snapshot,
     - have exactly one succeeded pod (success), or none succeeded and
       some failed (failure).

    No state is kept between notifications.
    """

    def __init__(self, resolver: OwnershipResolver, emitter: EventEmitter) -> None:
        self.resolver = resolver
        self.emitter = emitter

    def __call__(self, notification: JobNotification) -> JobPhase | None:
        metrics.JOB_NOTIFICATIONS_TOTAL.labels(kind=notification.kind.value).inc()

        try:
            old = WorkloadJob.from_object(notification.old) if notification.old is not None else None
            new = WorkloadJob.from_object(notification.new) if notification.new is not None else None
        except NotAJobError as e:
            structured_logging.logger.error(
                str(e),
                controller="Job",
                event="watch",
                reason="UnexpectedObject",
                notification=notification.kind.value,
            )
            return None

        outcome = detect_completion(old, new)
        if outcome is None or new is None:
            return None
        metrics.JOB_COMPLETIONS_TOTAL.labels(outcome=outcome.value).inc()

        try:
            owner = self.resolver.resolve(new)
        except OwnerLookupError as e:
            structured_logging.logger.error(
                f"Cannot find Job's owner: {e}",
                controller="Job",
                resource=new.key,
                uid=new.uid,
                event="ownership",
                reason="OwnerLookupFailed",
                error=str(e.__cause__ or e),
            )
            return None

        if owner is None:
            structured_logging.logger.debug(
                "Ignoring completed Job not owned by GitOpsConfig",
                controller="Job",
                resource=new.key,
                uid=new.uid,
                event="ownership",
                reason="OwnerNotFound",
            )
            return None

        self.emitter.emit(owner, new, outcome)
        return outcome
