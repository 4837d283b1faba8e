API_GROUP = "eunomia.kohls.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

OPERATOR_NAME = "gitops-operator"

# Owner kinds, compared case-sensitively against ownerReferences[].kind
GITOPS_KIND = "GitOpsConfig"
CRONJOB_KIND = "CronJob"

# Intermediary levels walked between a Job and its GitOpsConfig
MAX_OWNER_HOPS = 1

# Event types and reasons
EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"
REASON_JOB_SUCCESSFUL = "JobSuccessful"
REASON_JOB_FAILED = "JobFailed"

# Annotation keys
ANNOTATION_JOB = "job"

# Environment variables
METRICS_PORT_ENV = "METRICS_PORT"
REQUEST_TIMEOUT_ENV = "REQUEST_TIMEOUT"
MAX_WORKERS_ENV = "MAX_WORKERS"
WATCH_TIMEOUT_ENV = "JOB_WATCH_TIMEOUT_SECONDS"
LOG_LEVEL_ENV = "LOG_LEVEL"
EVENT_SOURCE_COMPONENT_ENV = "EVENT_SOURCE_COMPONENT"
