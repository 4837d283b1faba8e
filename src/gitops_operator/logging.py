from __future__ import annotations

import json
import logging
import sys
from typing import Any

STRUCTURED_FIELDS = ("controller", "resource", "uid", "event", "reason", "job", "owner")

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}


class StructuredJSONFormatter(logging.Formatter):
    """Formatter that renders each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.default_time_format),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRIBUTES and key not in STRUCTURED_FIELDS:
                log_entry[key] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_structured_logging(level: str | int = logging.INFO) -> None:
    """Route the root and kopf loggers through the JSON formatter on stdout."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredJSONFormatter())
    root_logger.addHandler(handler)

    # kopf propagates to the root logger
    logging.getLogger("kopf").setLevel(level)
    # Watch streams are chatty at debug level
    logging.getLogger("kubernetes").setLevel(max(level, logging.INFO))


class StructuredLogger:
    """Logger that attaches structured fields to every record."""

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    @property
    def name(self) -> str:
        return self._logger.name

    def _log_with_fields(
        self,
        level: int,
        message: str,
        controller: str | None = None,
        resource: str | None = None,
        uid: str | None = None,
        event: str | None = None,
        reason: str | None = None,
        exc_info: Any = None,
        **kwargs: Any,
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        extra: dict[str, Any] = {}
        if controller is not None:
            extra["controller"] = controller
        if resource is not None:
            extra["resource"] = resource
        if uid is not None:
            extra["uid"] = uid
        if event is not None:
            extra["event"] = event
        if reason is not None:
            extra["reason"] = reason
        extra.update({k: v for k, v in kwargs.items() if k not in _RECORD_ATTRIBUTES})

        self._logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **fields: Any) -> None:
        self._log_with_fields(logging.DEBUG, message, **fields)

    def info(self, message: str, **fields: Any) -> None:
        self._log_with_fields(logging.INFO, message, **fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._log_with_fields(logging.WARNING, message, **fields)

    def error(self, message: str, **fields: Any) -> None:
        """Log at error level; pass ``exc_info=True`` to attach the traceback."""
        self._log_with_fields(logging.ERROR, message, **fields)


logger = StructuredLogger("gitops-operator")
