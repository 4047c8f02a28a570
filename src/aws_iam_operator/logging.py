"""Structured logging configuration for the AWS IAM Operator."""

import json
import logging
import os
import sys
from typing import Any

from .utils.errors import sanitize_dict

# botocore logs request and response bodies at DEBUG
_QUIET_LOGGERS = ("botocore", "boto3", "urllib3")


def setup_structured_logging() -> None:
    """Configure JSON-per-line logging at LOG_LEVEL (default INFO)."""
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log one resource event as a single JSON object.

    Extra fields are merged in after credential fields are redacted and
    account ids in ARNs are masked.
    """
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(sanitize_dict(kwargs))
    logger.log(level, json.dumps(log_data, default=str))
