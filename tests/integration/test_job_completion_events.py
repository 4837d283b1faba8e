"""
Integration tests for Job completion events against a kind cluster.

The operator runs in-process against the cluster through kopf; Jobs are created
with owner references to a GitOpsConfig, directly or through a CronJob.
"""

import time

import pytest
from kopf.testing import KopfRunner
from kubernetes import client

from gitops_operator.constants import API_GROUP, API_GROUP_VERSION, API_VERSION

from conftest import wait_for_events

pytestmark = pytest.mark.integration


def _create_gitopsconfig(namespace: str, name: str) -> dict:
    return client.CustomObjectsApi().create_namespaced_custom_object(
        group=API_GROUP,
        version=API_VERSION,
        namespace=namespace,
        plural="gitopsconfigs",
        body={"apiVersion": API_GROUP_VERSION, "kind": "GitOpsConfig", "metadata": {"name": name}},
    )


def _owner_reference(obj_kind: str, api_version: str, name: str, uid: str) -> dict:
    return {"apiVersion": api_version, "kind": obj_kind, "name": name, "uid": uid}


def _job_manifest(name: str, command: str, owner: dict) -> dict:
    return {
        "apiVersion": "batch/v1",
        "kind": "Job",
        "metadata": {"name": name, "ownerReferences": [owner]},
        "spec": {
            "backoffLimit": 0,
            "template": {
                "spec": {
                    "restartPolicy": "Never",
                    "containers": [{"name": "main", "image": "busybox:1.36", "command": ["sh", "-c", command]}],
                }
            },
        },
    }


@pytest.fixture
def running_watch(kube_client, gitopsconfig_crd):
    with KopfRunner(["run", "--all-namespaces", "--standalone", "-m", "gitops_operator.main"]) as runner:
        # Let the initial Job listing settle
        time.sleep(5)
        yield runner

    assert runner.exception is None
    assert runner.exit_code == 0


def test_job_owned_by_gitopsconfig_reports_success(running_watch, test_namespace):
    config = _create_gitopsconfig(test_namespace, "app-config")
    owner = _owner_reference("GitOpsConfig", API_GROUP_VERSION, "app-config", config["metadata"]["uid"])

    client.BatchV1Api().create_namespaced_job(test_namespace, _job_manifest("build-42", "true", owner))

    events = wait_for_events(test_namespace, "JobSuccessful")
    assert len(events) == 1
    event = events[0]
    assert event.type == "Normal"
    assert event.involved_object.kind == "GitOpsConfig"
    assert event.involved_object.name == "app-config"
    assert event.involved_object.namespace == test_namespace
    assert event.metadata.annotations == {"job": "build-42"}


def test_job_owned_through_cronjob_reports_failure(running_watch, test_namespace):
    config = _create_gitopsconfig(test_namespace, "app-config")
    batch_api = client.BatchV1Api()
    cronjob = batch_api.create_namespaced_cron_job(
        test_namespace,
        {
            "apiVersion": "batch/v1",
            "kind": "CronJob",
            "metadata": {
                "name": "nightly",
                "ownerReferences": [
                    _owner_reference("GitOpsConfig", API_GROUP_VERSION, "app-config", config["metadata"]["uid"])
                ],
            },
            "spec": {
                "schedule": "0 0 1 1 *",
                "suspend": True,
                "jobTemplate": {"spec": _job_manifest("unused", "true", {})["spec"]},
            },
        },
    )
    owner = _owner_reference("CronJob", "batch/v1", "nightly", cronjob.metadata.uid)

    batch_api.create_namespaced_job(test_namespace, _job_manifest("build-43", "exit 1", owner))

    events = wait_for_events(test_namespace, "JobFailed")
    assert len(events) == 1
    assert events[0].type == "Warning"
    assert events[0].involved_object.name == "app-config"
    assert events[0].metadata.annotations == {"job": "build-43"}


def test_job_without_gitopsconfig_owner_is_ignored(running_watch, test_namespace):
    v1 = client.CoreV1Api()
    cm = v1.create_namespaced_config_map(
        test_namespace, client.V1ConfigMap(metadata=client.V1ObjectMeta(name="unrelated"))
    )
    owner = _owner_reference("ConfigMap", "v1", "unrelated", cm.metadata.uid)

    client.BatchV1Api().create_namespaced_job(test_namespace, _job_manifest("build-44", "true", owner))

    # Give the Job time to finish before checking nothing was reported
    time.sleep(30)
    assert wait_for_events(test_namespace, "JobSuccessful", timeout=1) == []
