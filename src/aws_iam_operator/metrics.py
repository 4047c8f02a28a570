"""Prometheus metrics for the AWS IAM Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "aws_iam_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "aws_iam_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

error_total = Counter(
    "aws_iam_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

# IAM operation metrics
aws_operations_total = Counter(
    "aws_iam_operator_aws_operations_total",
    "Total number of IAM create/update/delete operations",
    ["kind", "operation", "result"],
)

policy_versions_deleted_total = Counter(
    "aws_iam_operator_policy_versions_deleted_total",
    "Total number of managed policy versions pruned",
)

# Status persistence metrics
status_write_total = Counter(
    "aws_iam_operator_status_write_total",
    "Total number of status subresource writes",
    ["result"],
)

api_call_duration_seconds = Histogram(
    "aws_iam_operator_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)
