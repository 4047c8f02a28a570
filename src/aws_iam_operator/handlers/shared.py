"""Shared utilities for handlers."""

from __future__ import annotations

import os
import time
from typing import Any

from kubernetes import client

from .. import metrics
from ..constants import API_GROUP, API_VERSION, PLURALS


def get_k8s_client() -> client.CustomObjectsApi:
    """Get Kubernetes CustomObjectsApi client.

    Returns:
        CustomObjectsApi instance
    """
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return client.CustomObjectsApi()


def status_write_timeout() -> float:
    """Request timeout for status subresource writes."""
    return float(os.getenv("STATUS_WRITE_TIMEOUT", "10"))


class K8sStatusWriter:
    """Writes the status subresource of IAM custom resources."""

    def __init__(self, api: client.CustomObjectsApi, kind: str) -> None:
        """Initialize status writer.

        Args:
            api: Kubernetes CustomObjectsApi instance
            kind: Resource kind written by this writer
        """
        self.api = api
        self.plural = PLURALS[kind]

    def update(self, obj: dict[str, Any], timeout: float | None = None) -> None:
        """Patch obj["status"] onto the resource named by obj["metadata"].

        Raises:
            client.exceptions.ApiException: If the API server rejects the write
        """
        metadata = obj.get("metadata", {})
        start_time = time.time()
        try:
            self.api.patch_namespaced_custom_object_status(
                group=API_GROUP,
                version=API_VERSION,
                namespace=metadata.get("namespace", "default"),
                plural=self.plural,
                name=metadata["name"],
                body={"status": obj.get("status", {})},
                _request_timeout=timeout,
            )
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation="patch_status").observe(duration)


def get_custom_object(
    api: client.CustomObjectsApi,
    kind: str,
    name: str,
    namespace: str,
) -> dict[str, Any]:
    """Get one of the operator's custom resources.

    Raises:
        client.exceptions.ApiException: If the resource is not found or on API error
    """
    start_time = time.time()
    try:
        return api.get_namespaced_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            namespace=namespace,
            plural=PLURALS[kind],
            name=name,
        )
    finally:
        duration = time.time() - start_time
        metrics.api_call_duration_seconds.labels(api_type="k8s", operation=f"get_{kind.lower()}").observe(duration)


def iam_entity_name(spec: dict[str, Any], meta: dict[str, Any]) -> str:
    """Name of the IAM entity: spec.name when set, else the resource name."""
    return spec.get("name") or meta.get("name", "unknown")
