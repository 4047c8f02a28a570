"""Utility functions for the AWS IAM Operator."""

from .errors import sanitize_dict, sanitize_error_message, sanitize_exception
from .events import emit_event

__all__ = [
    "emit_event",
    "sanitize_dict",
    "sanitize_error_message",
    "sanitize_exception",
]
