"""Snapshots of the cluster objects the completion pipeline reads.

Watch payloads arrive either as kubernetes client models (``V1Job``,
``V1CronJob``) or as manifest dicts; both are flattened into the frozen
dataclasses below so the rest of the pipeline never touches raw payloads.
"""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from kubernetes import client

from .constants import CRONJOB_KIND
from .errors import NotAJobError


def _get(obj: Any, attr: str, key: str | None = None) -> Any:
    """Read a field from a client model (snake_case) or manifest dict (camelCase)."""
    if obj is None:
        return None
    if isinstance(obj, Mapping):
        return obj.get(key or attr)
    return getattr(obj, attr, None)


@dataclass(frozen=True)
class OwnerReference:
    kind: str
    api_version: str
    name: str
    uid: str | None = None
    controller: bool = False

    @classmethod
    def from_object(cls, ref: Any) -> OwnerReference:
        return cls(
            kind=_get(ref, "kind") or "",
            api_version=_get(ref, "api_version", "apiVersion") or "",
            name=_get(ref, "name") or "",
            uid=_get(ref, "uid"),
            controller=bool(_get(ref, "controller")),
        )


def _owner_references(metadata: Any) -> tuple[OwnerReference, ...]:
    refs = _get(metadata, "owner_references", "ownerReferences") or []
    return tuple(OwnerReference.from_object(ref) for ref in refs)


@dataclass(frozen=True)
class WorkloadJob:
    name: str
    namespace: str
    active: int = 0
    succeeded: int = 0
    failed: int = 0
    owner_references: tuple[OwnerReference, ...] = field(default_factory=tuple)
    uid: str | None = None

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def from_object(cls, obj: Any) -> WorkloadJob:
        """Build a snapshot from a ``V1Job`` or a Job manifest dict.

        Raises:
            NotAJobError: if ``obj`` is neither.
        """
        if isinstance(obj, cls):
            return obj
        if isinstance(obj, Mapping):
            kind = obj.get("kind")
            # Listed items may omit kind; they still carry metadata
            if kind != "Job" and (kind is not None or not isinstance(obj.get("metadata"), Mapping)):
                raise NotAJobError(obj)
        elif not isinstance(obj, client.V1Job):
            raise NotAJobError(obj)

        metadata = _get(obj, "metadata")
        status = _get(obj, "status")
        return cls(
            name=_get(metadata, "name") or "",
            namespace=_get(metadata, "namespace") or "",
            active=int(_get(status, "active") or 0),
            succeeded=int(_get(status, "succeeded") or 0),
            failed=int(_get(status, "failed") or 0),
            owner_references=_owner_references(metadata),
            uid=_get(metadata, "uid"),
        )


@dataclass(frozen=True)
class OwnedObject:
    """Identity and owner references of an intermediary owner, e.g. a CronJob."""

    kind: str
    name: str
    namespace: str
    owner_references: tuple[OwnerReference, ...] = field(default_factory=tuple)

    @classmethod
    def from_object(cls, obj: Any, kind: str) -> OwnedObject:
        metadata = _get(obj, "metadata")
        return cls(
            kind=_get(obj, "kind") or kind,
            name=_get(metadata, "name") or "",
            namespace=_get(metadata, "namespace") or "",
            owner_references=_owner_references(metadata),
        )


def scheduling_workload(obj: Any) -> OwnedObject:
    """Snapshot of a CronJob."""
    return OwnedObject.from_object(obj, CRONJOB_KIND)


@dataclass(frozen=True)
class LogicalOwner:
    """The GitOpsConfig a Job's completion is attributed to.

    Only identity fields are known; the namespace is always the Job's.
    """

    kind: str
    api_version: str
    name: str
    namespace: str

    @classmethod
    def from_reference(cls, ref: OwnerReference, namespace: str) -> LogicalOwner:
        return cls(kind=ref.kind, api_version=ref.api_version, name=ref.name, namespace=namespace)


class NotificationKind(str, enum.Enum):
    ADDED = "Added"
    UPDATED = "Updated"
    DELETED = "Deleted"


@dataclass(frozen=True)
class JobNotification:
    """One watch delivery: what kind of change, and the before/after payloads.

    Payloads are left raw so that a non-Job object can be reported by the
    handler instead of failing inside the watch loop.
    """

    kind: NotificationKind
    old: Any = None
    new: Any = None

    def __post_init__(self) -> None:
        if self.kind is NotificationKind.ADDED and (self.new is None or self.old is not None):
            raise ValueError("Added notification carries a new object only")
        if self.kind is NotificationKind.UPDATED and (self.new is None or self.old is None):
            raise ValueError("Updated notification carries both old and new objects")
        if self.kind is NotificationKind.DELETED and (self.old is None or self.new is not None):
            raise ValueError("Deleted notification carries an old object only")

    @classmethod
    def added(cls, obj: Any) -> JobNotification:
        return cls(NotificationKind.ADDED, new=obj)

    @classmethod
    def updated(cls, old: Any, new: Any) -> JobNotification:
        return cls(NotificationKind.UPDATED, old=old, new=new)

    @classmethod
    def deleted(cls, obj: Any) -> JobNotification:
        return cls(NotificationKind.DELETED, old=obj)
