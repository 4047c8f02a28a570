"""IAM entity instances backed by boto3."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Iterator

from botocore.exceptions import ClientError

from .instance import InstanceError, InstanceErrorCode
from .policy_versions import clean_up_policy_versions, list_policy_versions

logger = logging.getLogger(__name__)

_ERROR_CODES = {
    "NoSuchEntity": InstanceErrorCode.NOT_YET_CREATED,
    "EntityAlreadyExists": InstanceErrorCode.ALREADY_EXISTS,
    "MalformedPolicyDocument": InstanceErrorCode.INVALID_SPEC,
    "InvalidInput": InstanceErrorCode.INVALID_SPEC,
    "ValidationError": InstanceErrorCode.INVALID_SPEC,
}


@contextmanager
def translate_client_errors(action: str) -> Iterator[None]:
    """Re-raise botocore ClientErrors as classified InstanceErrors."""
    try:
        yield
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "")
        raise InstanceError(
            _ERROR_CODES.get(code, InstanceErrorCode.UNKNOWN),
            f"{action}: {e}",
        ) from e


def _policy_json(document: dict[str, Any] | str) -> str:
    if isinstance(document, str):
        return document
    return json.dumps(document)


class RoleInstance:
    """IAM role."""

    def __init__(
        self,
        name: str,
        assume_role_policy: dict[str, Any] | str,
        description: str = "",
        max_session_duration: int | None = None,
        path: str = "/",
        arn: str = "",
    ) -> None:
        self.name = name
        self.assume_role_policy = assume_role_policy
        self.description = description
        self.max_session_duration = max_session_duration
        self.path = path
        self._arn = arn

    def create(self, iam: Any) -> None:
        params: dict[str, Any] = {
            "RoleName": self.name,
            "Path": self.path,
            "AssumeRolePolicyDocument": _policy_json(self.assume_role_policy),
            "Description": self.description,
        }
        if self.max_session_duration:
            params["MaxSessionDuration"] = self.max_session_duration

        with translate_client_errors(f"failed to create role {self.name}"):
            response = iam.create_role(**params)
        self._arn = response["Role"]["Arn"]
        logger.info(f"Created role {self.name}")

    def update(self, iam: Any) -> None:
        params: dict[str, Any] = {"RoleName": self.name, "Description": self.description}
        if self.max_session_duration:
            params["MaxSessionDuration"] = self.max_session_duration

        with translate_client_errors(f"failed to update role {self.name}"):
            iam.update_role(**params)
            iam.update_assume_role_policy(
                RoleName=self.name,
                PolicyDocument=_policy_json(self.assume_role_policy),
            )
            response = iam.get_role(RoleName=self.name)
        self._arn = response["Role"]["Arn"]

    def delete(self, iam: Any) -> None:
        with translate_client_errors(f"failed to delete role {self.name}"):
            iam.delete_role(RoleName=self.name)
        logger.info(f"Deleted role {self.name}")

    def arn(self) -> str:
        return self._arn


class PolicyInstance:
    """IAM customer managed policy.

    Updates publish a new default version; older versions are pruned first so
    the IAM limit of five versions per policy is never reached. A policy whose
    ARN was not recorded is found again by name and path.
    """

    def __init__(
        self,
        name: str,
        document: dict[str, Any] | str,
        description: str = "",
        path: str = "/",
        arn: str = "",
    ) -> None:
        self.name = name
        self.document = document
        self.description = description
        self.path = path
        self._arn = arn

    def _lookup_arn(self, iam: Any) -> str:
        """Find the ARN of this account's policy with the same name and path."""
        with translate_client_errors(f"failed to look up policy {self.name}"):
            paginator = iam.get_paginator("list_policies")
            for page in paginator.paginate(Scope="Local", PathPrefix=self.path):
                for policy in page.get("Policies", []):
                    if policy.get("PolicyName") == self.name and policy.get("Path", "/") == self.path:
                        return policy["Arn"]
        return ""

    def _require_arn(self, iam: Any) -> str:
        if not self._arn:
            self._arn = self._lookup_arn(iam)
        if not self._arn:
            raise InstanceError(
                InstanceErrorCode.NOT_YET_CREATED,
                f"policy {self.name} does not exist",
            )
        return self._arn

    def create(self, iam: Any) -> None:
        try:
            with translate_client_errors(f"failed to create policy {self.name}"):
                response = iam.create_policy(
                    PolicyName=self.name,
                    Path=self.path,
                    PolicyDocument=_policy_json(self.document),
                    Description=self.description,
                )
        except InstanceError as e:
            if not e.is_of_error_code(InstanceErrorCode.ALREADY_EXISTS):
                raise
            self._arn = self._lookup_arn(iam)
            if not self._arn:
                raise
            logger.info(f"Policy {self.name} already exists, publishing a new version")
            self.update(iam)
            return
        self._arn = response["Policy"]["Arn"]
        logger.info(f"Created policy {self.name}")

    def update(self, iam: Any) -> None:
        arn = self._require_arn(iam)

        with translate_client_errors(f"failed to update policy {self.name}"):
            clean_up_policy_versions(iam, arn)
            iam.create_policy_version(
                PolicyArn=arn,
                PolicyDocument=_policy_json(self.document),
                SetAsDefault=True,
            )

    def delete(self, iam: Any) -> None:
        arn = self._require_arn(iam)

        with translate_client_errors(f"failed to delete policy {self.name}"):
            for version in list_policy_versions(iam, arn):
                if not version.get("IsDefaultVersion"):
                    iam.delete_policy_version(PolicyArn=arn, VersionId=version["VersionId"])
            iam.delete_policy(PolicyArn=arn)
        logger.info(f"Deleted policy {self.name}")

    def arn(self) -> str:
        return self._arn


class UserInstance:
    """IAM user."""

    def __init__(self, name: str, path: str = "/", arn: str = "") -> None:
        self.name = name
        self.path = path
        self._arn = arn

    def create(self, iam: Any) -> None:
        with translate_client_errors(f"failed to create user {self.name}"):
            response = iam.create_user(UserName=self.name, Path=self.path)
        self._arn = response["User"]["Arn"]
        logger.info(f"Created user {self.name}")

    def update(self, iam: Any) -> None:
        # Users carry no mutable settings beyond their path
        with translate_client_errors(f"failed to update user {self.name}"):
            response = iam.get_user(UserName=self.name)
            if response["User"].get("Path", "/") != self.path:
                iam.update_user(UserName=self.name, NewPath=self.path)
        self._arn = response["User"]["Arn"]

    def delete(self, iam: Any) -> None:
        with translate_client_errors(f"failed to delete user {self.name}"):
            iam.delete_user(UserName=self.name)
        logger.info(f"Deleted user {self.name}")

    def arn(self) -> str:
        return self._arn


class PolicyAttachmentInstance:
    """Attachment of a managed policy to a role or user.

    previous_policy_arn is the policy attached on the last successful
    reconcile; an update that switches policies detaches it.
    """

    TARGET_KINDS = ("Role", "User")

    def __init__(
        self,
        policy_arn: str,
        target_kind: str,
        target_name: str,
        previous_policy_arn: str = "",
    ) -> None:
        self.policy_arn = policy_arn
        self.target_kind = target_kind
        self.target_name = target_name
        self.previous_policy_arn = previous_policy_arn

    def _check_target(self) -> None:
        if self.target_kind not in self.TARGET_KINDS:
            raise InstanceError(
                InstanceErrorCode.INVALID_SPEC,
                f"unsupported attachment target kind {self.target_kind}",
            )

    def _attach(self, iam: Any) -> None:
        self._check_target()
        with translate_client_errors(f"failed to attach policy to {self.target_kind} {self.target_name}"):
            if self.target_kind == "Role":
                iam.attach_role_policy(RoleName=self.target_name, PolicyArn=self.policy_arn)
            else:
                iam.attach_user_policy(UserName=self.target_name, PolicyArn=self.policy_arn)

    def _detach(self, iam: Any, policy_arn: str) -> None:
        with translate_client_errors(f"failed to detach policy from {self.target_kind} {self.target_name}"):
            if self.target_kind == "Role":
                iam.detach_role_policy(RoleName=self.target_name, PolicyArn=policy_arn)
            else:
                iam.detach_user_policy(UserName=self.target_name, PolicyArn=policy_arn)
        logger.info(f"Detached {policy_arn} from {self.target_kind} {self.target_name}")

    def create(self, iam: Any) -> None:
        self._attach(iam)
        logger.info(f"Attached {self.policy_arn} to {self.target_kind} {self.target_name}")

    def update(self, iam: Any) -> None:
        # Attaching is idempotent in IAM
        self._attach(iam)

        previous = self.previous_policy_arn
        if not previous or previous == self.policy_arn:
            return
        try:
            self._detach(iam, previous)
        except InstanceError as e:
            # Already detached, or the old policy is gone
            if not e.is_of_error_code(InstanceErrorCode.NOT_YET_CREATED):
                raise
        self.previous_policy_arn = self.policy_arn

    def delete(self, iam: Any) -> None:
        if not self.policy_arn or not self.target_name:
            raise InstanceError(
                InstanceErrorCode.NOT_YET_CREATED,
                f"policy attachment to {self.target_kind} {self.target_name} was never made",
            )
        self._check_target()
        self._detach(iam, self.policy_arn)

    def arn(self) -> str:
        return self.policy_arn
