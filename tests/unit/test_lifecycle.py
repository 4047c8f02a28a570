"""Tests for create/update/delete dispatch."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from aws_iam_operator.handlers.lifecycle import (
    create_aws_object,
    delete_aws_object,
    do_nothing_pre_func,
    ignore_does_not_exist_error,
    update_aws_object,
)
from aws_iam_operator.handlers.status import (
    NO_OP_STATUS_UPDATER,
    ErrorStatusUpdater,
    SuccessStatusUpdater,
)
from aws_iam_operator.services.aws.instance import InstanceError, InstanceErrorCode


def failing_pre_func(message: str = "spec is invalid"):
    def pre_func() -> None:
        raise ValueError(message)

    return pre_func


@pytest.fixture
def instance() -> MagicMock:
    """Create a mock IAM instance."""
    ins = MagicMock()
    ins.arn.return_value = "arn:aws:iam::123456789012:role/test-role"
    return ins


@pytest.fixture
def iam() -> MagicMock:
    """Create a mock IAM client."""
    return MagicMock()


class TestIgnoreDoesNotExistError:
    """Test cases for ignore_does_not_exist_error."""

    def test_none_passes_through(self):
        """Test that None stays None."""
        assert ignore_does_not_exist_error(None) is None

    def test_not_yet_created_is_dropped(self):
        """Test that a not yet created instance error is dropped."""
        err = InstanceError(InstanceErrorCode.NOT_YET_CREATED, "role does not exist")
        assert ignore_does_not_exist_error(err) is None

    @pytest.mark.parametrize(
        "code",
        [InstanceErrorCode.ALREADY_EXISTS, InstanceErrorCode.INVALID_SPEC, InstanceErrorCode.UNKNOWN],
    )
    def test_other_instance_errors_are_kept(self, code):
        """Test that instance errors with other codes are returned unchanged."""
        err = InstanceError(code, "boom")
        assert ignore_does_not_exist_error(err) is err

    def test_other_exceptions_are_kept(self):
        """Test that non-instance errors are returned unchanged."""
        err = RuntimeError("NotYetCreated")
        assert ignore_does_not_exist_error(err) is err


class TestPreCheckFailure:
    """Pre-check failures never reach the instance."""

    @pytest.mark.parametrize("dispatch", [create_aws_object, update_aws_object, delete_aws_object])
    def test_pre_check_failure_returns_error_updater(self, dispatch, iam, instance):
        """Test that a failing pre-check yields an error updater carrying its message."""
        updater, err = dispatch(iam, instance, failing_pre_func("policyRef.name is required"))

        assert isinstance(updater, ErrorStatusUpdater)
        assert updater.reason == "policyRef.name is required"
        assert isinstance(err, ValueError)
        assert str(err) == "policyRef.name is required"
        instance.create.assert_not_called()
        instance.update.assert_not_called()
        instance.delete.assert_not_called()


class TestCreateAWSObject:
    """Test cases for create_aws_object."""

    def test_success(self, iam, instance):
        """Test that a successful create yields a success updater and no error."""
        updater, err = create_aws_object(iam, instance, do_nothing_pre_func)

        assert updater == SuccessStatusUpdater()
        assert err is None
        instance.create.assert_called_once_with(iam)

    def test_failure(self, iam, instance):
        """Test that a failed create yields an error updater and surfaces the error."""
        failure = InstanceError(InstanceErrorCode.ALREADY_EXISTS, "role already exists")
        instance.create.side_effect = failure

        updater, err = create_aws_object(iam, instance, do_nothing_pre_func)

        assert updater == ErrorStatusUpdater("role already exists")
        assert err is failure

    def test_not_yet_created_is_not_ignored_on_create(self, iam, instance):
        """Test that only delete treats not yet created as success."""
        failure = InstanceError(InstanceErrorCode.NOT_YET_CREATED, "missing")
        instance.create.side_effect = failure

        updater, err = create_aws_object(iam, instance, do_nothing_pre_func)

        assert isinstance(updater, ErrorStatusUpdater)
        assert err is failure


class TestUpdateAWSObject:
    """Test cases for update_aws_object."""

    def test_success(self, iam, instance):
        """Test that a successful update yields a success updater and no error."""
        updater, err = update_aws_object(iam, instance, do_nothing_pre_func)

        assert updater == SuccessStatusUpdater()
        assert err is None
        instance.update.assert_called_once_with(iam)
        instance.create.assert_not_called()

    def test_failure(self, iam, instance):
        """Test that a failed update yields an error updater and surfaces the error."""
        failure = RuntimeError("throttled")
        instance.update.side_effect = failure

        updater, err = update_aws_object(iam, instance, do_nothing_pre_func)

        assert updater == ErrorStatusUpdater("throttled")
        assert err is failure


class TestDeleteAWSObject:
    """Test cases for delete_aws_object."""

    def test_success_is_no_op(self, iam, instance):
        """Test that a successful delete leaves the status alone."""
        updater, err = delete_aws_object(iam, instance, do_nothing_pre_func)

        assert updater is NO_OP_STATUS_UPDATER
        assert err is None
        instance.delete.assert_called_once_with(iam)

    @pytest.mark.parametrize("message", ["role does not exist", "", "NoSuchEntity: gone"])
    def test_already_absent_is_no_op(self, iam, instance, message):
        """Test that deleting an entity that is already gone counts as success."""
        instance.delete.side_effect = InstanceError(InstanceErrorCode.NOT_YET_CREATED, message)

        updater, err = delete_aws_object(iam, instance, do_nothing_pre_func)

        assert updater is NO_OP_STATUS_UPDATER
        assert err is None

    def test_other_failure_is_surfaced(self, iam, instance):
        """Test that other delete failures yield an error updater and the original error."""
        failure = InstanceError(InstanceErrorCode.UNKNOWN, "DeleteConflict: policies attached")
        instance.delete.side_effect = failure

        updater, err = delete_aws_object(iam, instance, do_nothing_pre_func)

        assert updater == ErrorStatusUpdater("DeleteConflict: policies attached")
        assert err is failure
