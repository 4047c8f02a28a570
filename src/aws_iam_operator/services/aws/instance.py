"""Instance capability shared by all IAM entity kinds."""

from __future__ import annotations

import enum
from typing import Any, Protocol


class InstanceErrorCode(enum.Enum):
    """Classification of failures raised by an IAM instance."""

    NOT_YET_CREATED = "NotYetCreated"
    ALREADY_EXISTS = "AlreadyExists"
    INVALID_SPEC = "InvalidSpec"
    UNKNOWN = "Unknown"


class InstanceError(Exception):
    """Error raised by an IAM instance operation, carrying a classification code."""

    def __init__(self, code: InstanceErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def is_of_error_code(self, code: InstanceErrorCode) -> bool:
        """Return True if this error carries the given code."""
        return self.code is code


class AWSInstance(Protocol):
    """Protocol for a single remote IAM entity.

    Implementations translate provider failures into InstanceError so callers
    can classify them without inspecting botocore responses.
    """

    def create(self, iam: Any) -> None:
        """Create the entity."""
        ...

    def update(self, iam: Any) -> None:
        """Bring the existing entity in line with the declared spec."""
        ...

    def delete(self, iam: Any) -> None:
        """Delete the entity."""
        ...

    def arn(self) -> str:
        """Return the entity ARN, empty until the entity exists."""
        ...
