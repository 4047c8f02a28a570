"""Create, update and delete dispatch for IAM instances.

Each dispatcher makes one linear attempt: run the pre-check, run the instance
operation, and describe the outcome as a status updater. Failures are
returned next to the updater rather than raised so the caller can persist the
outcome before deciding how to surface the error.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Tuple

from .. import metrics
from ..services.aws.instance import AWSInstance, InstanceError, InstanceErrorCode
from .status import (
    NO_OP_STATUS_UPDATER,
    ErrorStatusUpdater,
    StatusUpdater,
    SuccessStatusUpdater,
)

PreFunc = Callable[[], None]
DispatchResult = Tuple[StatusUpdater, Optional[Exception]]


def do_nothing_pre_func() -> None:
    """Pre-check that always passes."""


def ignore_does_not_exist_error(err: Exception | None) -> Exception | None:
    """Drop errors meaning the IAM entity does not exist.

    Returns None for None and for an InstanceError coded NOT_YET_CREATED,
    otherwise err unchanged.
    """
    if isinstance(err, InstanceError) and err.is_of_error_code(InstanceErrorCode.NOT_YET_CREATED):
        return None
    return err


def _kind_of(instance: AWSInstance) -> str:
    return type(instance).__name__.removesuffix("Instance")


def _record(instance: AWSInstance, operation: str, result: str) -> None:
    metrics.aws_operations_total.labels(kind=_kind_of(instance), operation=operation, result=result).inc()


def create_aws_object(iam: Any, instance: AWSInstance, pre_func: PreFunc) -> DispatchResult:
    """Create an IAM entity.

    Args:
        iam: boto3 IAM client
        instance: Entity to create
        pre_func: Pre-check, raising on failure

    Returns:
        Tuple of status updater and the surfaced error, if any
    """
    try:
        pre_func()
    except Exception as e:
        return ErrorStatusUpdater(str(e)), e

    try:
        instance.create(iam)
    except Exception as e:
        _record(instance, "create", "failed")
        return ErrorStatusUpdater(str(e)), e

    _record(instance, "create", "success")
    return SuccessStatusUpdater(), None


def update_aws_object(iam: Any, instance: AWSInstance, pre_func: PreFunc) -> DispatchResult:
    """Update an IAM entity.

    Args:
        iam: boto3 IAM client
        instance: Entity to update
        pre_func: Pre-check, raising on failure

    Returns:
        Tuple of status updater and the surfaced error, if any
    """
    try:
        pre_func()
    except Exception as e:
        return ErrorStatusUpdater(str(e)), e

    try:
        instance.update(iam)
    except Exception as e:
        _record(instance, "update", "failed")
        return ErrorStatusUpdater(str(e)), e

    _record(instance, "update", "success")
    return SuccessStatusUpdater(), None


def delete_aws_object(iam: Any, instance: AWSInstance, pre_func: PreFunc) -> DispatchResult:
    """Delete an IAM entity.

    An entity that is already gone counts as deleted. A successful delete
    leaves the status untouched since the resource itself is going away.

    Args:
        iam: boto3 IAM client
        instance: Entity to delete
        pre_func: Pre-check, raising on failure

    Returns:
        Tuple of status updater and the surfaced error, if any
    """
    try:
        pre_func()
    except Exception as e:
        return ErrorStatusUpdater(str(e)), e

    try:
        instance.delete(iam)
    except Exception as e:
        if ignore_does_not_exist_error(e) is not None:
            _record(instance, "delete", "failed")
            return ErrorStatusUpdater(str(e)), e
        _record(instance, "delete", "absent")
        return NO_OP_STATUS_UPDATER, None

    _record(instance, "delete", "success")
    return NO_OP_STATUS_UPDATER, None
