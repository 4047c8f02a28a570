"""Builder for IAM policy documents."""

from __future__ import annotations

from typing import Any

DEFAULT_POLICY_VERSION = "2012-10-17"

_STATEMENT_KEYS = {
    "sid": "Sid",
    "effect": "Effect",
    "principal": "Principal",
    "notPrincipal": "NotPrincipal",
    "action": "Action",
    "notAction": "NotAction",
    "resource": "Resource",
    "notResource": "NotResource",
    "condition": "Condition",
}


def convert_statement(stmt: dict[str, Any]) -> dict[str, Any]:
    """Convert one CRD statement to the IAM statement format.

    CRD statements use camelCase keys (effect, action, resource), IAM expects
    PascalCase. A principal given as a bare ARN string is wrapped in
    {"AWS": arn}.
    """
    aws_stmt: dict[str, Any] = {}
    for key, value in stmt.items():
        aws_key = _STATEMENT_KEYS.get(key, key)
        if aws_key in ("Principal", "NotPrincipal") and isinstance(value, str) and value.startswith("arn:"):
            value = {"AWS": value}
        aws_stmt[aws_key] = value
    return aws_stmt


def build_policy_document(
    statements: list[dict[str, Any]],
    version: str = DEFAULT_POLICY_VERSION,
) -> dict[str, Any]:
    """Build an IAM policy document from CRD statements.

    Args:
        statements: Statement entries from the CRD spec
        version: Policy language version

    Returns:
        Policy document ready to be serialized for IAM
    """
    return {
        "Version": version,
        "Statement": [convert_statement(stmt) for stmt in statements],
    }


def validate_statements(statements: Any, field: str) -> None:
    """Check that a spec field holds a non-empty list of statements.

    Raises:
        ValueError: If the statements are missing or malformed
    """
    if not statements:
        raise ValueError(f"{field} is required")
    if not isinstance(statements, list):
        raise ValueError(f"{field} must be a list of statements")
    for idx, stmt in enumerate(statements):
        if not isinstance(stmt, dict):
            raise ValueError(f"{field}[{idx}] must be an object")
        if "effect" not in stmt:
            raise ValueError(f"{field}[{idx}] must contain 'effect' field")
