from __future__ import annotations

from prometheus_client import Counter, Histogram

JOB_NOTIFICATIONS_TOTAL = Counter(
    "gitops_operator_job_notifications_total",
    "Number of Job watch notifications handled",
    labelnames=("kind",),
)

JOB_COMPLETIONS_TOTAL = Counter(
    "gitops_operator_job_completions_total",
    "Number of Job terminal transitions detected",
    labelnames=("outcome",),
)

COMPLETION_EVENTS_TOTAL = Counter(
    "gitops_operator_completion_events_total",
    "Number of completion events published",
    labelnames=("reason", "result"),
)

OWNER_LOOKUPS_TOTAL = Counter(
    "gitops_operator_owner_lookups_total",
    "Number of Job ownership resolutions",
    labelnames=("result",),
)

OWNER_LOOKUP_DURATION = Histogram(
    "gitops_operator_owner_lookup_duration_seconds",
    "Duration of Job ownership resolutions in seconds",
    buckets=(0.001, 0.01, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
)
