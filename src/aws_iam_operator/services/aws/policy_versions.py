"""Retention of managed policy versions."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ... import metrics
from ...constants import MAX_POLICY_VERSIONS

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def delete_policy_version(iam: Any, policy_arn: str, version_id: str) -> None:
    """Delete a single version of a managed policy."""
    iam.delete_policy_version(PolicyArn=policy_arn, VersionId=version_id)


def list_policy_versions(iam: Any, policy_arn: str) -> list[dict[str, Any]]:
    """List all versions of a managed policy, newest first.

    The default version is always placed first, the rest are ordered by
    CreateDate descending regardless of the order IAM returns them in.
    """
    versions: list[dict[str, Any]] = []
    paginator = iam.get_paginator("list_policy_versions")
    for page in paginator.paginate(PolicyArn=policy_arn):
        versions.extend(page.get("Versions", []))

    return sorted(
        versions,
        key=lambda v: (bool(v.get("IsDefaultVersion")), v.get("CreateDate") or _EPOCH),
        reverse=True,
    )


def clean_up_policy_versions(
    iam: Any,
    policy_arn: str,
    max_versions: int = MAX_POLICY_VERSIONS,
) -> None:
    """Delete the oldest versions of a managed policy beyond max_versions.

    Deletion runs oldest first and stops at the first failure, which is
    raised. Versions already deleted stay deleted; the next pass prunes the
    remainder.

    Args:
        iam: boto3 IAM client
        policy_arn: ARN of the managed policy
        max_versions: Number of newest versions to keep
    """
    versions = list_policy_versions(iam, policy_arn)

    if len(versions) <= max_versions:
        return

    for i in range(len(versions) - 1, max_versions - 1, -1):
        version_id = versions[i]["VersionId"]
        delete_policy_version(iam, policy_arn, version_id)
        metrics.policy_versions_deleted_total.inc()
        logger.debug(f"Deleted policy version {version_id} of {policy_arn}")

    logger.info(f"Pruned {len(versions) - max_versions} versions of policy {policy_arn}")
