"""Exception types raised by the Job completion pipeline."""

from __future__ import annotations

from typing import Any


class GitOpsOperatorError(Exception):
    """Base class for operator errors."""


class NotAJobError(GitOpsOperatorError, TypeError):
    """A watch notification carried something other than a Job."""

    def __init__(self, obj: Any) -> None:
        self.obj = obj
        super().__init__(f"non-Job object passed to Job completion handler: {type(obj).__name__}")


class OwnerLookupError(GitOpsOperatorError):
    """An intermediary owner of a Job could not be fetched from the cluster."""

    def __init__(self, kind: str, name: str, job_name: str, namespace: str) -> None:
        self.kind = kind
        self.name = name
        self.job_name = job_name
        self.namespace = namespace
        super().__init__(
            f"cannot load {kind} owner {name!r} of Job {job_name!r} in namespace {namespace!r}"
        )


class WatchEstablishmentError(GitOpsOperatorError):
    """The cluster-wide Job watch could not be started."""
