"""Tests for IAM client construction."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from aws_iam_operator.services.aws import client as client_module
from aws_iam_operator.services.aws.client import iam_service, reset_clients


@pytest.fixture(autouse=True)
def clear_clients():
    reset_clients()
    yield
    reset_clients()


class TestIAMService:
    """Test cases for iam_service."""

    @patch("aws_iam_operator.services.aws.client.boto3")
    def test_builds_client_for_region(self, mock_boto3):
        """Test that an IAM client is built from a regional session."""
        iam = iam_service("eu-west-1")

        mock_boto3.session.Session.assert_called_once_with(region_name="eu-west-1")
        session = mock_boto3.session.Session.return_value
        assert session.client.call_args.args == ("iam",)
        assert iam is session.client.return_value

    @patch("aws_iam_operator.services.aws.client.boto3")
    def test_client_is_cached_per_region(self, mock_boto3):
        """Test that clients are reused per region."""
        first = iam_service("eu-west-1")
        second = iam_service("eu-west-1")
        iam_service("us-west-2")

        assert first is second
        assert mock_boto3.session.Session.call_count == 2

    @patch("aws_iam_operator.services.aws.client.boto3")
    def test_region_from_environment(self, mock_boto3, monkeypatch):
        """Test that AWS_REGION is used when no region is given."""
        monkeypatch.setenv("AWS_REGION", "ap-southeast-2")

        iam_service()

        mock_boto3.session.Session.assert_called_once_with(region_name="ap-southeast-2")

    @patch("aws_iam_operator.services.aws.client.boto3")
    def test_default_region(self, mock_boto3, monkeypatch):
        """Test that us-east-1 is used when nothing is configured."""
        monkeypatch.delenv("AWS_REGION", raising=False)

        iam_service()

        mock_boto3.session.Session.assert_called_once_with(region_name="us-east-1")

    def test_timeouts_from_environment(self, monkeypatch):
        """Test that IAM calls are bounded by configurable timeouts."""
        monkeypatch.setenv("IAM_CONNECT_TIMEOUT", "2")
        monkeypatch.setenv("IAM_READ_TIMEOUT", "15")
        monkeypatch.setenv("IAM_MAX_ATTEMPTS", "1")

        config = client_module._client_config()

        assert config.connect_timeout == 2.0
        assert config.read_timeout == 15.0
        assert config.retries["max_attempts"] == 1
