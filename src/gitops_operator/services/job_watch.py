"""Translation of kopf Job watch events into before/after notifications.

kopf delivers only the current state of a Job. The last seen body per UID is
cached here so that each notification can carry the prior snapshot.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Mapping
from typing import Any

from .. import logging as structured_logging
from ..models import JobNotification

JobHandler = Callable[[JobNotification], Any]


def _uid(obj: Mapping[str, Any]) -> str:
    metadata = obj.get("metadata") or {}
    return metadata.get("uid") or f"{metadata.get('namespace')}/{metadata.get('name')}"


class JobWatch:
    """Feeds Job watch events to a handler until stopped.

    Events for one Job arrive in order; the cache is only ever touched for
    the UID of the event being handled.
    """

    def __init__(self, handler: JobHandler) -> None:
        self._handler = handler
        self._cache: dict[str, Mapping[str, Any]] = {}
        self._stop_event = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        """Stop delivery and drop cached snapshots. Safe to call more than once."""
        self._stop_event.set()
        self._cache.clear()

    def notification_for(self, event_type: str | None, obj: Mapping[str, Any]) -> JobNotification:
        """Build the notification for one watch event and update the cache.

        ``event_type`` is None for objects replayed from a (re)listing; those
        are handled like ADDED.
        """
        uid = _uid(obj)
        if event_type == "DELETED":
            self._cache.pop(uid, None)
            return JobNotification.deleted(obj)

        old = self._cache.get(uid)
        self._cache[uid] = obj
        if old is None:
            return JobNotification.added(obj)
        return JobNotification.updated(old, obj)

    def dispatch(self, event: Mapping[str, Any]) -> Any:
        """Hand one kopf watch event to the handler; a no-op once stopped."""
        if self.stopped:
            return None
        obj = event.get("object")
        if not isinstance(obj, Mapping):
            structured_logging.logger.error(
                "non-Job object in Job watch event",
                controller="Job",
                event="watch",
                reason="UnexpectedObject",
                object_type=type(obj).__name__,
            )
            return None
        return self._handler(self.notification_for(event.get("type"), obj))
