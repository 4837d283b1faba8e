#!/usr/bin/env python3
from __future__ import annotations

import argparse
from contextlib import suppress

from kubernetes import client, config

from gitops_operator.errors import OwnerLookupError
from gitops_operator.models import WorkloadJob
from gitops_operator.services.events import EventEmitter
from gitops_operator.services.ownership import OwnershipResolver
from gitops_operator.utils.completion import detect_completion


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Report completed Jobs and the GitOpsConfig they are attributed to"
    )
    parser.add_argument("--namespace", help="Namespace to inspect (default: all namespaces)")
    parser.add_argument(
        "--emit", action="store_true", help="Publish JobSuccessful/JobFailed events"
    )
    args = parser.parse_args()

    # Load kube config (in-cluster or local)
    with suppress(Exception):
        config.load_incluster_config()
    with suppress(Exception):
        config.load_kube_config()

    batch_api = client.BatchV1Api()
    resolver = OwnershipResolver(batch_api)
    emitter = EventEmitter(client.CoreV1Api()) if args.emit else None

    if args.namespace:
        jobs = batch_api.list_namespaced_job(namespace=args.namespace)
    else:
        jobs = batch_api.list_job_for_all_namespaces()

    exit_code = 0
    for item in jobs.items:
        # Evaluated like a first observation: no prior snapshot
        job = WorkloadJob.from_object(item)
        outcome = detect_completion(None, job)
        if outcome is None:
            continue

        try:
            owner = resolver.resolve(job)
        except OwnerLookupError as e:
            print(f"{job.key}\t{outcome.value}\terror: {e}")
            exit_code = 1
            continue
        if owner is None:
            continue

        print(f"{job.key}\t{outcome.value}\t{owner.kind}/{owner.name}")
        if emitter is not None:
            emitter.emit(owner, job, outcome)

    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
