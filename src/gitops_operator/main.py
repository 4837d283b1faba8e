from __future__ import annotations

from contextlib import suppress
from typing import Any

import kopf
from kubernetes import client, config
from prometheus_client import start_http_server

from . import logging as structured_logging
from .config import OperatorConfig, load_config
from .errors import WatchEstablishmentError
from .services.completion import JobCompletionHandler
from .services.events import EventEmitter
from .services.job_watch import JobWatch
from .services.ownership import OwnershipResolver

WATCH_RETRY_DELAY = 10.0


def _load_kube_config() -> bool:
    """Load in-cluster config, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
        return True
    except config.ConfigException:
        pass
    try:
        config.load_kube_config()
        return True
    except (config.ConfigException, OSError):
        return False


def build_job_watch(operator_config: OperatorConfig) -> JobWatch:
    """Wire the completion pipeline onto the Job watch.

    Raises:
        WatchEstablishmentError: if the API clients cannot be created.
    """
    try:
        batch_api = client.BatchV1Api()
        core_api = client.CoreV1Api()
    except Exception as e:
        raise WatchEstablishmentError(f"cannot create Job watcher: {e}") from e

    handler = JobCompletionHandler(
        resolver=OwnershipResolver(batch_api),
        emitter=EventEmitter(core_api, source_component=operator_config.event_source_component),
    )
    return JobWatch(handler)


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_: Any) -> None:
    operator_config = load_config()
    structured_logging.setup_structured_logging(operator_config.log_level)

    settings.posting.level = 0
    settings.networking.request_timeout = operator_config.request_timeout
    settings.execution.max_workers = operator_config.max_workers
    settings.watching.server_timeout = operator_config.watch_timeout_seconds

    # Port may already be bound when the activity is retried
    with suppress(OSError):
        start_http_server(operator_config.metrics_port)

    if not _load_kube_config():
        raise kopf.PermanentError("no in-cluster or local Kubernetes configuration found")

    try:
        memo.job_watch = build_job_watch(operator_config)
    except WatchEstablishmentError as e:
        structured_logging.logger.error(
            f"Cannot start Job watch: {e}",
            controller="Job",
            event="watch",
            reason="WatchFailed",
        )
        raise kopf.TemporaryError(str(e), delay=WATCH_RETRY_DELAY) from e


@kopf.on.event("batch", "v1", "jobs")
def handle_job_event(event: dict[str, Any], memo: kopf.Memo, **_: Any) -> None:
    """Run the completion pipeline for every Job change in the cluster."""
    job_watch = getattr(memo, "job_watch", None)
    if job_watch is None:
        return
    job_watch.dispatch(event)


@kopf.on.cleanup()
def stop_job_watch(memo: kopf.Memo, **_: Any) -> None:
    job_watch = getattr(memo, "job_watch", None)
    if job_watch is None:
        return
    job_watch.stop()
    structured_logging.logger.info(
        "Job watch stopped",
        controller="Job",
        event="watch",
        reason="WatchStopped",
    )
