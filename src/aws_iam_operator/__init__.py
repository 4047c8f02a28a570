"""Kubernetes operator managing AWS IAM roles, policies, users and policy attachments."""

__version__ = "0.1.0"
