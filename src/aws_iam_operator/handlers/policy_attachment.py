"""Handler for PolicyAttachment CRD."""

from __future__ import annotations

from typing import Any

import kopf
from kubernetes import client

from ..constants import API_GROUP_VERSION, KIND_POLICY, KIND_POLICY_ATTACHMENT, KIND_ROLE, KIND_USER
from ..services.aws.entities import PolicyAttachmentInstance
from ..services.aws.instance import AWSInstance
from .base import OPERATION_CREATE, OPERATION_DELETE, OPERATION_UPDATE, BaseHandler
from .lifecycle import PreFunc
from .shared import get_custom_object, get_k8s_client, iam_entity_name
from .status import AWSObjectStatus


def _ref(spec: dict[str, Any], field: str, meta: dict[str, Any]) -> tuple[str, str]:
    ref = spec.get(field) or {}
    return ref.get("name", ""), ref.get("namespace", meta.get("namespace", "default"))


class PolicyAttachmentHandler(BaseHandler):
    """Handler for PolicyAttachment resources.

    The attachment references a Policy and a Role or User resource; both are
    resolved in the pre-check so a missing or not yet reconciled reference
    is recorded in the attachment status.
    """

    def __init__(self):
        """Initialize policy attachment handler."""
        super().__init__(KIND_POLICY_ATTACHMENT)

    def build_instance(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: AWSObjectStatus,
    ) -> PolicyAttachmentInstance:
        target = spec.get("target") or {}
        # The status ARN is the policy attached on the last successful pass
        return PolicyAttachmentInstance(
            policy_arn=status.arn,
            target_kind=target.get("kind", ""),
            target_name="",
            previous_policy_arn=status.arn,
        )

    def resolve_arn(self, api: client.CustomObjectsApi, kind: str, name: str, namespace: str) -> tuple[dict[str, Any], str]:
        """Fetch a referenced resource and the ARN recorded in its status.

        Raises:
            ValueError: If the resource is missing or has no ARN yet
        """
        if not name:
            raise ValueError(f"{kind} reference name is required")
        try:
            obj = get_custom_object(api, kind, name, namespace)
        except client.exceptions.ApiException as e:
            if e.status == 404:
                raise ValueError(f"{kind} {name} not found in namespace {namespace}") from e
            raise

        arn = (obj.get("status") or {}).get("arn", "")
        if not arn:
            raise ValueError(f"{kind} {name} in namespace {namespace} has no ARN yet")
        return obj, arn

    def pre_check(
        self,
        operation: str,
        spec: dict[str, Any],
        meta: dict[str, Any],
        instance: AWSInstance,
    ) -> PreFunc:
        policy_name, policy_ns = _ref(spec, "policyRef", meta)
        target_name, target_ns = _ref(spec, "target", meta)
        target_kind = (spec.get("target") or {}).get("kind", "")

        def check() -> None:
            if target_kind not in (KIND_ROLE, KIND_USER):
                raise ValueError(f"target.kind must be {KIND_ROLE} or {KIND_USER}")

            api = get_k8s_client()
            _, policy_arn = self.resolve_arn(api, KIND_POLICY, policy_name, policy_ns)
            target_obj, _ = self.resolve_arn(api, target_kind, target_name, target_ns)

            instance.policy_arn = policy_arn
            instance.target_name = iam_entity_name(target_obj.get("spec") or {}, target_obj.get("metadata") or {})

        def check_delete() -> None:
            # A target that is gone leaves nothing to detach
            if target_kind not in (KIND_ROLE, KIND_USER) or not target_name:
                return
            try:
                target_obj = get_custom_object(get_k8s_client(), target_kind, target_name, target_ns)
            except client.exceptions.ApiException as e:
                if e.status == 404:
                    return
                raise
            instance.target_name = iam_entity_name(target_obj.get("spec") or {}, target_obj.get("metadata") or {})

        return check_delete if operation == OPERATION_DELETE else check


# Global handler instance
_handler = PolicyAttachmentHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_POLICY_ATTACHMENT)
def handle_policy_attachment_create(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle PolicyAttachment creation."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(OPERATION_CREATE, body, spec, meta))


@kopf.on.update(API_GROUP_VERSION, KIND_POLICY_ATTACHMENT)
def handle_policy_attachment_update(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle PolicyAttachment update."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(OPERATION_UPDATE, body, spec, meta))


@kopf.on.resume(API_GROUP_VERSION, KIND_POLICY_ATTACHMENT)
def handle_policy_attachment_resume(
    body: kopf.Body,
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle PolicyAttachment seen again after an operator restart."""
    operation = _handler.resume_operation(status)
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(operation, body, spec, meta))


@kopf.on.delete(API_GROUP_VERSION, KIND_POLICY_ATTACHMENT)
def handle_policy_attachment_delete(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle PolicyAttachment deletion."""
    _handler.reconcile(OPERATION_DELETE, body, spec, meta)
