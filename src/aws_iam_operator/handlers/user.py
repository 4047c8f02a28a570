"""Handler for User CRD."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_USER
from ..services.aws.entities import UserInstance
from .base import OPERATION_CREATE, OPERATION_DELETE, OPERATION_UPDATE, BaseHandler
from .shared import iam_entity_name
from .status import AWSObjectStatus


class UserHandler(BaseHandler):
    """Handler for User resources."""

    def __init__(self):
        """Initialize user handler."""
        super().__init__(KIND_USER)

    def build_instance(self, spec: dict[str, Any], meta: dict[str, Any], status: AWSObjectStatus) -> UserInstance:
        return UserInstance(
            name=iam_entity_name(spec, meta),
            path=spec.get("path", "/"),
            arn=status.arn,
        )


# Global handler instance
_handler = UserHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_USER)
def handle_user_create(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle User creation."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(OPERATION_CREATE, body, spec, meta))


@kopf.on.update(API_GROUP_VERSION, KIND_USER)
def handle_user_update(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle User update."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(OPERATION_UPDATE, body, spec, meta))


@kopf.on.resume(API_GROUP_VERSION, KIND_USER)
def handle_user_resume(
    body: kopf.Body,
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    **kwargs: Any,
) -> None:
    """Handle User seen again after an operator restart."""
    operation = _handler.resume_operation(status)
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(operation, body, spec, meta))


@kopf.on.delete(API_GROUP_VERSION, KIND_USER)
def handle_user_delete(body: kopf.Body, spec: dict[str, Any], meta: dict[str, Any], **kwargs: Any) -> None:
    """Handle User deletion."""
    _handler.reconcile(OPERATION_DELETE, body, spec, meta)
