"""Resolution of the GitOpsConfig that owns a Job."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from time import monotonic
from typing import Any

from kubernetes import client

from .. import logging as structured_logging
from .. import metrics
from ..constants import CRONJOB_KIND, GITOPS_KIND, MAX_OWNER_HOPS
from ..errors import OwnerLookupError
from ..models import LogicalOwner, OwnedObject, OwnerReference, WorkloadJob, scheduling_workload

# Fetches an intermediary owner by (name, namespace)
OwnerFetcher = Callable[[str, str], OwnedObject]


def get_owner_by_kind(
    refs: tuple[OwnerReference, ...] | list[OwnerReference], kind: str
) -> OwnerReference | None:
    """Return the first owner reference of ``kind``, or None.

    When several match, which one is returned is unspecified.
    """
    for ref in refs:
        if ref.kind == kind:
            return ref
    return None


def cronjob_fetcher(batch_api: client.BatchV1Api) -> OwnerFetcher:
    def fetch(name: str, namespace: str) -> OwnedObject:
        return scheduling_workload(batch_api.read_namespaced_cron_job(name=name, namespace=namespace))

    return fetch


class OwnershipResolver:
    """Finds the nearest owner of ``target_kind`` for a Job.

    The Job's own owner references are checked first. Failing that, the first
    owner of each intermediary kind (CronJob by default) is fetched and its
    owner references checked in turn, up to ``max_hops`` intermediary levels.
    """

    def __init__(
        self,
        batch_api: client.BatchV1Api | None = None,
        *,
        intermediaries: Mapping[str, OwnerFetcher] | None = None,
        target_kind: str = GITOPS_KIND,
        max_hops: int = MAX_OWNER_HOPS,
    ) -> None:
        if intermediaries is None:
            intermediaries = {CRONJOB_KIND: self._fetch_cronjob}
        self._batch_api = batch_api
        self._intermediaries = dict(intermediaries)
        self.target_kind = target_kind
        self.max_hops = max_hops

    @property
    def batch_api(self) -> client.BatchV1Api:
        if self._batch_api is None:
            self._batch_api = client.BatchV1Api()
        return self._batch_api

    def _fetch_cronjob(self, name: str, namespace: str) -> OwnedObject:
        return cronjob_fetcher(self.batch_api)(name, namespace)

    def resolve(self, job: WorkloadJob) -> LogicalOwner | None:
        """Return the Job's logical owner, or None when it has none.

        Raises:
            OwnerLookupError: if an intermediary owner cannot be fetched.
        """
        started_at = monotonic()
        try:
            owner, hops = self._walk(job)
        except OwnerLookupError:
            metrics.OWNER_LOOKUPS_TOTAL.labels(result="error").inc()
            raise
        finally:
            metrics.OWNER_LOOKUP_DURATION.observe(monotonic() - started_at)

        if owner is None:
            result = "not_found"
        elif hops == 0:
            result = "direct"
        else:
            result = "indirect"
        metrics.OWNER_LOOKUPS_TOTAL.labels(result=result).inc()
        return owner

    def _walk(self, job: WorkloadJob) -> tuple[LogicalOwner | None, int]:
        visited: set[tuple[str, str]] = {("Job", job.name)}
        return self._search(job, job.owner_references, 0, visited)

    def _search(
        self,
        job: WorkloadJob,
        refs: tuple[OwnerReference, ...],
        hop: int,
        visited: set[tuple[str, str]],
    ) -> tuple[LogicalOwner | None, int]:
        ref = get_owner_by_kind(refs, self.target_kind)
        if ref is not None:
            # ownerReferences carry no namespace; owners live beside the Job
            return LogicalOwner.from_reference(ref, job.namespace), hop
        if hop >= self.max_hops:
            return None, 0

        # One owner per intermediary kind, each searched before the next is fetched
        for kind, fetch in self._intermediaries.items():
            ref = get_owner_by_kind(refs, kind)
            if ref is None or (ref.kind, ref.name) in visited:
                continue
            visited.add((ref.kind, ref.name))
            owner, depth = self._search(job, self._fetch(fetch, ref, job), hop + 1, visited)
            if owner is not None:
                return owner, depth
        return None, 0

    def _fetch(
        self, fetch: OwnerFetcher, ref: OwnerReference, job: WorkloadJob
    ) -> tuple[OwnerReference, ...]:
        try:
            intermediary: Any = fetch(ref.name, job.namespace)
        except Exception as e:
            raise OwnerLookupError(ref.kind, ref.name, job.name, job.namespace) from e
        structured_logging.logger.debug(
            f"Loaded {ref.kind} owner of Job",
            controller="Job",
            resource=job.key,
            event="ownership",
            reason="IntermediaryLoaded",
            owner=f"{ref.kind}/{ref.name}",
        )
        return intermediary.owner_references
