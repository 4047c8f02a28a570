"""Handler for Policy CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.policy_document import build_policy_document, validate_statements
from ..constants import API_GROUP_VERSION, KIND_POLICY
from ..services.aws.entities import PolicyInstance
from ..services.aws.instance import AWSInstance
from .base import OPERATION_CREATE, OPERATION_DELETE, OPERATION_UPDATE, BaseHandler
from .lifecycle import PreFunc, do_nothing_pre_func
from .shared import iam_entity_name
from .status import AWSObjectStatus


class PolicyHandler(BaseHandler):
    """Handler for Policy resources."""

    def __init__(self):
        """Initialize policy handler."""
        super().__init__(KIND_POLICY)

    def build_instance(self, spec: dict[str, Any], meta: dict[str, Any], status: AWSObjectStatus) -> PolicyInstance:
        name = iam_entity_name(spec, meta)
        return PolicyInstance(
            name=name,
            document=build_policy_document(spec.get("statement") or []),
            description=spec.get("description", f"Policy {name} managed by aws-iam-operator"),
            path=spec.get("path", "/"),
            arn=status.arn,
        )

    def pre_check(
        self,
        operation: str,
        spec: dict[str, Any],
        meta: dict[str, Any],
        instance: AWSInstance,
    ) -> PreFunc:
        if operation == OPERATION_DELETE:
            return do_nothing_pre_func
        return lambda: validate_statements(spec.get("statement"), "statement")


# Global handler instance
_handler = PolicyHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_POLICY)
def handle_policy_create(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle Policy creation."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(OPERATION_CREATE, body, spec, meta))


@kopf.on.update(API_GROUP_VERSION, KIND_POLICY)
def handle_policy_update(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle Policy update."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(OPERATION_UPDATE, body, spec, meta))


@kopf.on.resume(API_GROUP_VERSION, KIND_POLICY)
def handle_policy_resume(
    body: kopf.Body,
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle Policy seen again after an operator restart."""
    operation = _handler.resume_operation(status)
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(operation, body, spec, meta))


@kopf.on.delete(API_GROUP_VERSION, KIND_POLICY)
def handle_policy_delete(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle Policy deletion."""
    _handler.reconcile(OPERATION_DELETE, body, spec, meta)
