"""Tests for shared handler utilities."""

from __future__ import annotations

from unittest.mock import Mock, patch

import pytest
from kubernetes import config
from kubernetes.client.exceptions import ApiException

from aws_iam_operator.handlers.shared import (
    K8sStatusWriter,
    get_custom_object,
    get_k8s_client,
    iam_entity_name,
    status_write_timeout,
)


class TestK8sStatusWriter:
    """Test cases for K8sStatusWriter."""

    def test_patches_status_subresource(self):
        """Test that only the status is sent, with the request timeout."""
        api = Mock()
        writer = K8sStatusWriter(api, "Policy")
        obj = {
            "metadata": {"name": "read", "namespace": "team-a"},
            "spec": {"statement": []},
            "status": {"arn": "arn:aws:iam::123456789012:policy/read", "state": "OK"},
        }

        writer.update(obj, timeout=10.0)

        api.patch_namespaced_custom_object_status.assert_called_once_with(
            group="aws-iam.redradrat.xyz",
            version="v1beta1",
            namespace="team-a",
            plural="policies",
            name="read",
            body={"status": obj["status"]},
            _request_timeout=10.0,
        )

    def test_api_error_propagates(self):
        """Test that write failures reach the caller."""
        api = Mock()
        api.patch_namespaced_custom_object_status.side_effect = ApiException(status=409, reason="Conflict")

        with pytest.raises(ApiException):
            K8sStatusWriter(api, "Role").update({"metadata": {"name": "app"}, "status": {}})


class TestGetCustomObject:
    """Test cases for get_custom_object."""

    def test_reads_by_plural(self):
        """Test that the kind maps to its plural."""
        api = Mock()
        api.get_namespaced_custom_object.return_value = {"metadata": {"name": "app"}}

        result = get_custom_object(api, "User", "app", "default")

        assert result == {"metadata": {"name": "app"}}
        api.get_namespaced_custom_object.assert_called_once_with(
            group="aws-iam.redradrat.xyz",
            version="v1beta1",
            namespace="default",
            plural="users",
            name="app",
        )


class TestHelpers:
    """Test cases for small helpers."""

    def test_iam_entity_name_prefers_spec(self):
        """Test that spec.name overrides the resource name."""
        assert iam_entity_name({"name": "app-role"}, {"name": "app"}) == "app-role"
        assert iam_entity_name({}, {"name": "app"}) == "app"

    def test_status_write_timeout(self, monkeypatch):
        """Test that the status write timeout is configurable."""
        monkeypatch.delenv("STATUS_WRITE_TIMEOUT", raising=False)
        assert status_write_timeout() == 10.0
        monkeypatch.setenv("STATUS_WRITE_TIMEOUT", "2.5")
        assert status_write_timeout() == 2.5


class TestGetK8sClient:
    """Test cases for get_k8s_client function."""

    @patch("aws_iam_operator.handlers.shared.client.CustomObjectsApi")
    @patch("kubernetes.config.load_incluster_config")
    def test_get_k8s_client_incluster(self, mock_load_incluster, mock_api):
        """Test getting K8s client with in-cluster config."""
        result = get_k8s_client()

        assert result == mock_api.return_value
        mock_load_incluster.assert_called_once()

    @patch("aws_iam_operator.handlers.shared.client.CustomObjectsApi")
    @patch("kubernetes.config.load_kube_config")
    @patch("kubernetes.config.load_incluster_config")
    def test_get_k8s_client_kubeconfig(self, mock_load_incluster, mock_load_kube, mock_api):
        """Test falling back to kubeconfig outside a cluster."""
        mock_load_incluster.side_effect = config.ConfigException("not in cluster")

        result = get_k8s_client()

        assert result == mock_api.return_value
        mock_load_kube.assert_called_once()
