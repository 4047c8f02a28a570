"""Base handler class with common functionality for all CRD handlers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import kopf

from .. import metrics
from ..constants import CONTROLLER_NAME
from ..logging import log_resource_event
from ..services.aws.client import iam_service
from ..services.aws.instance import AWSInstance
from ..tracing import trace_span
from ..utils.errors import sanitize_exception
from ..utils.events import emit_deleted, emit_reconcile_failed, emit_reconcile_started, emit_reconciled
from .lifecycle import PreFunc, create_aws_object, delete_aws_object, do_nothing_pre_func, update_aws_object
from .shared import K8sStatusWriter, get_k8s_client, status_write_timeout
from .status import AWSObjectStatus, AWSObjectStatusResource, StatusWriter, apply_status_updater

OPERATION_CREATE = "create"
OPERATION_UPDATE = "update"
OPERATION_DELETE = "delete"

_DISPATCHERS = {
    OPERATION_CREATE: create_aws_object,
    OPERATION_UPDATE: update_aws_object,
    OPERATION_DELETE: delete_aws_object,
}


class BaseHandler:
    """Base class for all CRD handlers with common functionality.

    Subclasses describe how a resource maps onto an IAM instance; the base
    class drives the dispatch and persists the outcome.
    """

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "Role", "Policy")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        """Extract common resource context from metadata."""
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def _log(self, level: int, meta: dict[str, Any], message: str, event: str, reason: str, **kwargs: Any) -> None:
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            controller=CONTROLLER_NAME,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            level=level,
            **kwargs,
        )

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message."""
        self._log(logging.INFO, meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(logging.WARNING, meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()

        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__

        self._log(logging.ERROR, meta, message, event, reason, **log_data)

    def build_instance(self, spec: dict[str, Any], meta: dict[str, Any], status: AWSObjectStatus) -> AWSInstance:
        """Build the IAM instance declared by a resource."""
        raise NotImplementedError

    def pre_check(
        self,
        operation: str,
        spec: dict[str, Any],
        meta: dict[str, Any],
        instance: AWSInstance,
    ) -> PreFunc:
        """Return the check run before the IAM call; validates nothing by default."""
        return do_nothing_pre_func

    def get_iam(self) -> Any:
        """Return the IAM client used for this handler's calls."""
        return iam_service()

    def get_status_writer(self) -> StatusWriter:
        """Return the persistence handle for this kind's status subresource."""
        return K8sStatusWriter(get_k8s_client(), self.kind)

    def reconcile(
        self,
        operation: str,
        body: dict[str, Any],
        spec: dict[str, Any],
        meta: dict[str, Any],
    ) -> None:
        """Run one create, update or delete attempt and persist its outcome.

        Raises:
            kopf.TemporaryError: If the attempt failed; kopf retries later
        """
        resource = AWSObjectStatusResource.from_body(dict(body))
        instance = self.build_instance(spec, meta, resource.status)
        dispatch = _DISPATCHERS[operation]

        with trace_span(f"{operation}_{self.kind.lower()}", kind=self.kind, attributes={"resource.name": meta.get("name", "")}):
            updater, err = dispatch(self.get_iam(), instance, self.pre_check(operation, spec, meta, instance))

        apply_status_updater(
            updater,
            instance,
            resource,
            self.get_status_writer(),
            self.logger,
            timeout=status_write_timeout(),
        )

        if err is not None:
            raise kopf.TemporaryError(f"Failed to {operation} {self.kind}: {sanitize_exception(err)}") from err

        if operation == OPERATION_DELETE:
            self.log_info(meta, f"{self.kind} deleted", event="deletion", reason="Deleted")
            emit_deleted(body)
        else:
            self.log_info(meta, f"{self.kind} reconciled", reason="Reconciled", arn=instance.arn())
            emit_reconciled(body, instance.arn())

    def reconcile_with_metrics(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        reconcile_fn: Callable[[], None],
    ) -> None:
        """Execute reconciliation with metrics and error handling.

        Args:
            body: Kubernetes resource body, used for events
            meta: Kubernetes resource metadata
            reconcile_fn: Function to execute for reconciliation
        """
        emit_reconcile_started(body)
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        try:
            reconcile_fn()
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
        except Exception as e:
            cause = e.__cause__ or e
            sanitized_error = sanitize_exception(cause)
            metrics.error_total.labels(kind=self.kind, error_type=type(cause).__name__).inc()
            self.log_error(meta, "Reconciliation failed", error=cause, reason="ReconciliationFailed")
            emit_reconcile_failed(body, f"Reconciliation failed: {sanitized_error}")
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        finally:
            duration = time.time() - start_time
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(duration)

    def resume_operation(self, status: dict[str, Any]) -> str:
        """Pick the operation for a resource seen again after an operator restart."""
        return OPERATION_UPDATE if (status or {}).get("arn") else OPERATION_CREATE
