"""Main entry point for the AWS IAM Operator.

Run with ``kopf run -m aws_iam_operator.main`` or the ``aws-iam-operator``
console script.
"""

from __future__ import annotations

import os
import sys
from typing import Any

import kopf

from . import handlers  # noqa: F401
from . import health
from . import logging as structured_logging
from .constants import FINALIZER
from .services.aws.client import reset_clients
from .tracing import initialize_tracing


@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, **_: Any) -> None:
    """Configure the operator."""
    structured_logging.setup_structured_logging()
    initialize_tracing()

    # Keep kopf's bookkeeping out of .status, which belongs to the status writer
    settings.persistence.progress_storage = kopf.AnnotationsProgressStorage()
    settings.persistence.diffbase_storage = kopf.AnnotationsDiffBaseStorage()
    settings.persistence.finalizer = FINALIZER

    settings.posting.level = 0
    settings.networking.request_timeout = 30.0
    settings.execution.max_workers = int(os.getenv("MAX_WORKERS", "4"))

    metrics_port = int(os.getenv("METRICS_PORT", "8080"))
    health.start_metrics_server(metrics_port)


@kopf.on.cleanup()
def cleanup(**_: Any) -> None:
    """Release cached IAM clients on shutdown."""
    reset_clients()


def main() -> None:
    """Run the operator in all namespaces, or in WATCH_NAMESPACE when set."""
    namespace = os.getenv("WATCH_NAMESPACE")
    sys.exit(
        kopf.run(
            clusterwide=not namespace,
            namespaces=[namespace] if namespace else (),
            standalone=True,
        )
    )


if __name__ == "__main__":
    main()
