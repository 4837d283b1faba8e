"""
Pytest configuration and fixtures for integration tests.
"""

import os
import subprocess
import time
import uuid

import pytest
from kubernetes import client, config

from gitops_operator.constants import API_GROUP, API_VERSION

KIND_CLUSTER = os.getenv("KIND_CLUSTER", "gitops-operator-test")

GITOPSCONFIG_CRD = {
    "apiVersion": "apiextensions.k8s.io/v1",
    "kind": "CustomResourceDefinition",
    "metadata": {"name": f"gitopsconfigs.{API_GROUP}"},
    "spec": {
        "group": API_GROUP,
        "names": {
            "kind": "GitOpsConfig",
            "listKind": "GitOpsConfigList",
            "plural": "gitopsconfigs",
            "singular": "gitopsconfig",
        },
        "scope": "Namespaced",
        "versions": [
            {
                "name": API_VERSION,
                "served": True,
                "storage": True,
                "schema": {
                    "openAPIV3Schema": {
                        "type": "object",
                        "x-kubernetes-preserve-unknown-fields": True,
                    }
                },
            }
        ],
    },
}


@pytest.fixture(scope="session")
def kind_available():
    """Check if kind is available."""
    try:
        subprocess.run(["kind", "version"], capture_output=True, check=True)
        return True
    except (subprocess.CalledProcessError, FileNotFoundError):
        pytest.skip("kind not available")


@pytest.fixture(scope="session")
def kube_client(kind_available):
    """Load the kubeconfig of an existing kind cluster."""
    result = subprocess.run(
        ["kind", "get", "kubeconfig", "--name", KIND_CLUSTER], capture_output=True, text=True
    )
    if result.returncode != 0:
        pytest.skip(f"kind cluster {KIND_CLUSTER} not running")

    kubeconfig = os.path.join(os.getenv("TMPDIR", "/tmp"), f"{KIND_CLUSTER}.kubeconfig")
    with open(kubeconfig, "w") as f:
        f.write(result.stdout)
    # The operator under test loads the default kubeconfig
    os.environ["KUBECONFIG"] = kubeconfig
    config.load_kube_config(config_file=kubeconfig)
    return client.ApiClient()


@pytest.fixture(scope="session")
def gitopsconfig_crd(kube_client):
    """Install the GitOpsConfig CRD so owner references resolve."""
    api = client.ApiextensionsV1Api()
    try:
        api.create_custom_resource_definition(body=GITOPSCONFIG_CRD)
    except client.exceptions.ApiException as e:
        if e.status != 409:
            raise
    deadline = time.time() + 60
    while time.time() < deadline:
        crd = api.read_custom_resource_definition(GITOPSCONFIG_CRD["metadata"]["name"])
        conditions = (crd.status and crd.status.conditions) or []
        if any(c.type == "Established" and c.status == "True" for c in conditions):
            return
        time.sleep(1)
    pytest.fail("GitOpsConfig CRD not established")


@pytest.fixture
def test_namespace(kube_client):
    """Create a throwaway namespace for one test."""
    name = f"gitops-it-{uuid.uuid4().hex[:8]}"
    v1 = client.CoreV1Api()
    v1.create_namespace(client.V1Namespace(metadata=client.V1ObjectMeta(name=name)))
    yield name
    try:
        v1.delete_namespace(name)
    except client.exceptions.ApiException:
        pass


def wait_for_events(namespace: str, reason: str, timeout: int = 120) -> list:
    """Poll for events with the given reason in a namespace."""
    v1 = client.CoreV1Api()
    deadline = time.time() + timeout
    while time.time() < deadline:
        events = v1.list_namespaced_event(namespace, field_selector=f"reason={reason}")
        if events.items:
            return events.items
        time.sleep(2)
    return []
