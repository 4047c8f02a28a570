"""Status records and the updaters that persist reconciliation outcomes."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol, Union

from .. import metrics
from ..constants import LAST_SYNC_ATTEMPT_FORMAT, SUCCESS_MESSAGE
from ..services.aws.instance import AWSInstance


class SyncState(str, enum.Enum):
    """Sync state recorded in a resource status."""

    OK = "OK"
    ERROR = "Error"


@dataclass
class AWSObjectStatus:
    """Status record shared by every IAM custom resource."""

    arn: str = ""
    message: str = ""
    state: SyncState | None = None
    last_sync_attempt: str = ""

    @classmethod
    def from_dict(cls, status: dict[str, Any] | None) -> AWSObjectStatus:
        """Build a status record from a resource's .status mapping."""
        status = status or {}
        state = status.get("state")
        return cls(
            arn=status.get("arn", ""),
            message=status.get("message", ""),
            state=SyncState(state) if state else None,
            last_sync_attempt=status.get("lastSyncAttempt", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the .status mapping, omitting unset fields."""
        data: dict[str, Any] = {}
        if self.arn:
            data["arn"] = self.arn
        if self.message:
            data["message"] = self.message
        if self.state is not None:
            data["state"] = self.state.value
        if self.last_sync_attempt:
            data["lastSyncAttempt"] = self.last_sync_attempt
        return data


@dataclass
class AWSObjectStatusResource:
    """A custom resource as seen by the status writer.

    Only the status record is mutated; the body is handed to the writer as is.
    """

    body: dict[str, Any]
    status: AWSObjectStatus = field(default_factory=AWSObjectStatus)

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> AWSObjectStatusResource:
        return cls(body=body, status=AWSObjectStatus.from_dict(body.get("status")))

    def runtime_object(self) -> dict[str, Any]:
        """Return the persistable object carrying the current status."""
        return {**self.body, "status": self.status.to_dict()}


class StatusWriter(Protocol):
    """Persists the status of a custom resource."""

    def update(self, obj: dict[str, Any], timeout: float | None = None) -> None:
        """Write obj["status"] to the resource's status subresource."""
        ...


@dataclass(frozen=True)
class SuccessStatusUpdater:
    """Record a successful reconciliation."""


@dataclass(frozen=True)
class ErrorStatusUpdater:
    """Record a failed reconciliation with its reason."""

    reason: str


@dataclass(frozen=True)
class NoOpStatusUpdater:
    """Leave the status untouched."""


StatusUpdater = Union[SuccessStatusUpdater, ErrorStatusUpdater, NoOpStatusUpdater]

NO_OP_STATUS_UPDATER = NoOpStatusUpdater()


def _now() -> str:
    return datetime.now(timezone.utc).astimezone().strftime(LAST_SYNC_ATTEMPT_FORMAT)


def _write_status(
    resource: AWSObjectStatusResource,
    status_writer: StatusWriter,
    logger: logging.Logger,
    timeout: float | None,
) -> None:
    try:
        status_writer.update(resource.runtime_object(), timeout=timeout)
        metrics.status_write_total.labels(result="success").inc()
    except Exception as e:
        # Next reconciliation rewrites the status
        metrics.status_write_total.labels(result="failed").inc()
        logger.error(f"unable to write status to resource: {e}")


def apply_status_updater(
    updater: StatusUpdater,
    instance: AWSInstance,
    resource: AWSObjectStatusResource,
    status_writer: StatusWriter,
    logger: logging.Logger,
    timeout: float | None = None,
) -> None:
    """Apply a status updater to a resource and persist the result.

    Persistence failures are logged, never raised.

    Args:
        updater: Outcome returned by a lifecycle dispatcher
        instance: IAM instance the outcome refers to
        resource: Resource whose status is mutated in place
        status_writer: Persistence handle for the status subresource
        logger: Logger for persistence failures
        timeout: Request timeout for the status write
    """
    status = resource.status

    if isinstance(updater, NoOpStatusUpdater):
        return

    if isinstance(updater, SuccessStatusUpdater):
        status.arn = instance.arn()
        status.message = SUCCESS_MESSAGE
        status.state = SyncState.OK
    elif isinstance(updater, ErrorStatusUpdater):
        status.message = updater.reason
        status.state = SyncState.ERROR
    else:
        raise TypeError(f"unknown status updater {updater!r}")

    status.last_sync_attempt = _now()
    _write_status(resource, status_writer, logger, timeout)


def err_with_status(
    resource: AWSObjectStatusResource,
    err: Exception,
    status_writer: StatusWriter,
    timeout: float | None = None,
) -> Exception:
    """Record err in the resource status and return the error to raise.

    If the status write itself fails, the write error is returned instead of
    err.
    """
    resource.status.message = str(err)
    resource.status.state = SyncState.ERROR
    try:
        status_writer.update(resource.runtime_object(), timeout=timeout)
    except Exception as write_err:
        metrics.status_write_total.labels(result="failed").inc()
        return write_err
    metrics.status_write_total.labels(result="success").inc()
    return err
