from __future__ import annotations

import os
from dataclasses import dataclass

from .constants import (
    EVENT_SOURCE_COMPONENT_ENV,
    LOG_LEVEL_ENV,
    MAX_WORKERS_ENV,
    METRICS_PORT_ENV,
    OPERATOR_NAME,
    REQUEST_TIMEOUT_ENV,
    WATCH_TIMEOUT_ENV,
)


@dataclass(frozen=True)
class OperatorConfig:
    """Process-level settings, read once at startup."""

    metrics_port: int = 8080
    request_timeout: float = 30.0
    max_workers: int = 4
    watch_timeout_seconds: int = 300
    log_level: str = "INFO"
    event_source_component: str = OPERATOR_NAME


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def load_config() -> OperatorConfig:
    """Build an OperatorConfig from the environment.

    Unset or malformed values fall back to the defaults.
    """
    defaults = OperatorConfig()
    return OperatorConfig(
        metrics_port=_env_int(METRICS_PORT_ENV, defaults.metrics_port),
        request_timeout=_env_float(REQUEST_TIMEOUT_ENV, defaults.request_timeout),
        max_workers=max(1, _env_int(MAX_WORKERS_ENV, defaults.max_workers)),
        watch_timeout_seconds=max(1, _env_int(WATCH_TIMEOUT_ENV, defaults.watch_timeout_seconds)),
        log_level=(os.getenv(LOG_LEVEL_ENV) or defaults.log_level).strip().upper(),
        event_source_component=os.getenv(EVENT_SOURCE_COMPONENT_ENV)
        or defaults.event_source_component,
    )
