"""Tests for PolicyAttachment reference resolution."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from kubernetes.client.exceptions import ApiException

from aws_iam_operator.handlers.base import OPERATION_CREATE, OPERATION_DELETE, OPERATION_UPDATE
from aws_iam_operator.handlers.policy_attachment import PolicyAttachmentHandler
from aws_iam_operator.handlers.status import AWSObjectStatus
from aws_iam_operator.services.aws.entities import PolicyAttachmentInstance

POLICY_ARN = "arn:aws:iam::123456789012:policy/test-policy"
ROLE_ARN = "arn:aws:iam::123456789012:role/app-role"

META = {"name": "attach", "namespace": "team-a"}
SPEC = {
    "policyRef": {"name": "test-policy"},
    "target": {"kind": "Role", "name": "app"},
}


def policy_obj(arn: str = POLICY_ARN) -> dict:
    return {"metadata": {"name": "test-policy"}, "spec": {}, "status": {"arn": arn} if arn else {}}


def role_obj() -> dict:
    return {"metadata": {"name": "app"}, "spec": {"name": "app-role"}, "status": {"arn": ROLE_ARN}}


@pytest.fixture
def handler() -> PolicyAttachmentHandler:
    return PolicyAttachmentHandler()


@patch("aws_iam_operator.handlers.policy_attachment.get_k8s_client")
@patch("aws_iam_operator.handlers.policy_attachment.get_custom_object")
class TestPolicyAttachmentPreCheck:
    """Test cases for the attachment pre-check."""

    def test_resolves_policy_and_target(self, mock_get, mock_client, handler):
        """Test that the policy ARN and target IAM name are resolved."""
        mock_get.side_effect = [policy_obj(), role_obj()]
        instance = handler.build_instance(SPEC, META, AWSObjectStatus())

        handler.pre_check(OPERATION_CREATE, SPEC, META, instance)()

        assert instance.policy_arn == POLICY_ARN
        assert instance.target_kind == "Role"
        assert instance.target_name == "app-role"
        mock_get.assert_any_call(mock_client.return_value, "Policy", "test-policy", "team-a")
        mock_get.assert_any_call(mock_client.return_value, "Role", "app", "team-a")

    def test_policy_without_arn(self, mock_get, mock_client, handler):
        """Test that a policy that is not reconciled yet fails the pre-check."""
        mock_get.side_effect = [policy_obj(arn=""), role_obj()]
        instance = handler.build_instance(SPEC, META, AWSObjectStatus())

        with pytest.raises(ValueError, match="has no ARN yet"):
            handler.pre_check(OPERATION_CREATE, SPEC, META, instance)()

    def test_missing_policy(self, mock_get, mock_client, handler):
        """Test that a missing policy fails the pre-check."""
        mock_get.side_effect = ApiException(status=404, reason="Not Found")
        instance = handler.build_instance(SPEC, META, AWSObjectStatus())

        with pytest.raises(ValueError, match="not found in namespace team-a"):
            handler.pre_check(OPERATION_CREATE, SPEC, META, instance)()

    def test_api_error_propagates(self, mock_get, mock_client, handler):
        """Test that other API errors are raised as is."""
        mock_get.side_effect = ApiException(status=500, reason="Internal")
        instance = handler.build_instance(SPEC, META, AWSObjectStatus())

        with pytest.raises(ApiException):
            handler.pre_check(OPERATION_CREATE, SPEC, META, instance)()

    def test_invalid_target_kind(self, mock_get, mock_client, handler):
        """Test that only roles and users can be targeted."""
        spec = {**SPEC, "target": {"kind": "Group", "name": "admins"}}
        instance = handler.build_instance(spec, META, AWSObjectStatus())

        with pytest.raises(ValueError, match="target.kind"):
            handler.pre_check(OPERATION_CREATE, spec, META, instance)()

        mock_get.assert_not_called()

    def test_delete_uses_recorded_policy(self, mock_get, mock_client, handler):
        """Test that delete detaches the policy recorded in status."""
        mock_get.return_value = role_obj()
        instance = handler.build_instance(SPEC, META, AWSObjectStatus(arn=POLICY_ARN))

        handler.pre_check(OPERATION_DELETE, SPEC, META, instance)()

        assert isinstance(instance, PolicyAttachmentInstance)
        assert instance.policy_arn == POLICY_ARN
        assert instance.target_name == "app-role"
        mock_get.assert_called_once_with(mock_client.return_value, "Role", "app", "team-a")

    def test_delete_with_target_gone(self, mock_get, mock_client, handler):
        """Test that a deleted target leaves nothing to detach."""
        mock_get.side_effect = ApiException(status=404, reason="Not Found")
        instance = handler.build_instance(SPEC, META, AWSObjectStatus(arn=POLICY_ARN))

        handler.pre_check(OPERATION_DELETE, SPEC, META, instance)()

        assert instance.target_name == ""

    def test_update_remembers_replaced_policy(self, mock_get, mock_client, handler):
        """Test that a changed policy reference keeps the old ARN for detaching."""
        old_arn = "arn:aws:iam::123456789012:policy/old-policy"
        mock_get.side_effect = [policy_obj(), role_obj()]
        instance = handler.build_instance(SPEC, META, AWSObjectStatus(arn=old_arn))

        handler.pre_check(OPERATION_UPDATE, SPEC, META, instance)()

        assert instance.policy_arn == POLICY_ARN
        assert instance.previous_policy_arn == old_arn
