"""
Custom exceptions for service layer.

Provides specific exception types for business logic errors
that can be translated to appropriate HTTP responses.
"""

from typing import Any, Optional, Sequence


class ServiceError(Exception):
    """Base exception for service layer errors."""
    pass


class NotFoundError(ServiceError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: Any):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ConflictError(ServiceError):
    """Raised when an operation conflicts with existing state (duplicates)."""

    def __init__(self, message: str, existing_id: Optional[int] = None):
        self.message = message
        self.existing_id = existing_id
        super().__init__(message)


class ValidationError(ServiceError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(message)


class ResourceConflictError(ServiceError):
    """Raised when a resource assignment is rejected by the conflict validator.

    Carries the rejecting verdict and the resource it was computed for, so the
    API layer can return the full diagnostic payload.
    """

    def __init__(
        self,
        verdict,
        resource_kind: str,
        resource_id: int,
        resource_code: str,
    ):
        self.verdict = verdict
        self.resource_kind = resource_kind
        self.resource_id = resource_id
        self.resource_code = resource_code
        self.message = verdict.message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Rejection body returned to API clients."""
        return {
            "valid": False,
            "message": self.verdict.message,
            "error_type": self.verdict.reason_code.value,
            "reason_code": self.verdict.reason_code.value,
            "resource_kind": self.resource_kind,
            "resource_id": self.resource_id,
            "resource_code": self.resource_code,
            "details": self.verdict.details,
        }


class ResourceLockTimeoutError(ServiceError):
    """Raised when a scheduling lock could not be acquired in time.

    Transient: the caller may retry the whole mutation.
    """

    def __init__(self, keys: Sequence[Any], timeout: float):
        self.keys = list(keys)
        self.timeout = timeout
        self.message = (
            f"Timed out after {timeout:g}s waiting for scheduling lock on "
            f"{len(self.keys)} resource slot(s); please retry"
        )
        super().__init__(self.message)
