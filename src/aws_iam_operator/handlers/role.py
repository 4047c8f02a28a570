"""Handler for Role CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..builders.policy_document import build_policy_document, validate_statements
from ..constants import API_GROUP_VERSION, KIND_ROLE
from ..services.aws.entities import RoleInstance
from ..services.aws.instance import AWSInstance
from .base import OPERATION_CREATE, OPERATION_DELETE, OPERATION_UPDATE, BaseHandler
from .lifecycle import PreFunc, do_nothing_pre_func
from .shared import iam_entity_name
from .status import AWSObjectStatus


class RoleHandler(BaseHandler):
    """Handler for Role resources."""

    def __init__(self):
        """Initialize role handler."""
        super().__init__(KIND_ROLE)

    def build_instance(self, spec: dict[str, Any], meta: dict[str, Any], status: AWSObjectStatus) -> RoleInstance:
        return RoleInstance(
            name=iam_entity_name(spec, meta),
            assume_role_policy=build_policy_document(spec.get("assumeRolePolicy") or []),
            description=spec.get("description", ""),
            max_session_duration=spec.get("maxSessionDuration"),
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

        def check() -> None:
            validate_statements(spec.get("assumeRolePolicy"), "assumeRolePolicy")
            duration = spec.get("maxSessionDuration")
            if duration is not None and not 3600 <= int(duration) <= 43200:
                raise ValueError("maxSessionDuration must be between 3600 and 43200 seconds")

        return check


# Global handler instance
_handler = RoleHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_ROLE)
def handle_role_create(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle Role creation."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(OPERATION_CREATE, body, spec, meta))


@kopf.on.update(API_GROUP_VERSION, KIND_ROLE)
def handle_role_update(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle Role update."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(OPERATION_UPDATE, body, spec, meta))


@kopf.on.resume(API_GROUP_VERSION, KIND_ROLE)
def handle_role_resume(
    body: kopf.Body,
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle Role seen again after an operator restart."""
    operation = _handler.resume_operation(status)
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(operation, body, spec, meta))


@kopf.on.delete(API_GROUP_VERSION, KIND_ROLE)
def handle_role_delete(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle Role deletion."""
    _handler.reconcile(OPERATION_DELETE, body, spec, meta)
