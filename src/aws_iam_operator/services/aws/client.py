"""IAM client construction."""

from __future__ import annotations

import logging
import os
import threading
from typing import Any

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"

_clients: dict[str, Any] = {}
_clients_lock = threading.Lock()


def _client_config() -> Config:
    """Build the botocore config used for IAM clients.

    Connect and read timeouts bound every IAM call so a slow endpoint cannot
    hold a handler worker indefinitely.
    """
    return Config(
        connect_timeout=float(os.getenv("IAM_CONNECT_TIMEOUT", "5")),
        read_timeout=float(os.getenv("IAM_READ_TIMEOUT", "30")),
        retries={
            "mode": "standard",
            "max_attempts": int(os.getenv("IAM_MAX_ATTEMPTS", "3")),
        },
    )


def iam_service(region: str | None = None) -> Any:
    """Return an authenticated IAM client for a region.

    Credentials come from the default boto3 chain (environment, IRSA web
    identity, instance profile). Clients are thread-safe and cached per region.

    Args:
        region: AWS region, defaults to AWS_REGION or us-east-1

    Returns:
        boto3 IAM client
    """
    region = region or os.getenv("AWS_REGION", DEFAULT_REGION)

    with _clients_lock:
        iam = _clients.get(region)
        if iam is None:
            session = boto3.session.Session(region_name=region)
            iam = session.client("iam", config=_client_config())
            _clients[region] = iam
            logger.debug(f"Created IAM client for region {region}")
        return iam


def reset_clients() -> None:
    """Drop all cached IAM clients."""
    with _clients_lock:
        _clients.clear()
