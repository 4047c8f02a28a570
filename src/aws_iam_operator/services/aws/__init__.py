"""AWS IAM services."""

from .client import iam_service
from .instance import AWSInstance, InstanceError, InstanceErrorCode
from .policy_versions import clean_up_policy_versions, delete_policy_version

__all__ = [
    "AWSInstance",
    "InstanceError",
    "InstanceErrorCode",
    "clean_up_policy_versions",
    "delete_policy_version",
    "iam_service",
]
