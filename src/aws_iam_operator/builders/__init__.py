"""Builders turning CRD specs into IAM request payloads."""

from .policy_document import build_policy_document, convert_statement, validate_statements

__all__ = ["build_policy_document", "convert_statement", "validate_statements"]
