"""Errors raised by the service layer."""

from __future__ import annotations

from typing import Iterable, List, Optional


class ServiceError(Exception):
    """Base class for service errors surfaced to callers."""


class UnauthorizedError(ServiceError):
    """Raised when the principal may not perform the requested action."""


class AuthenticationRequiredError(UnauthorizedError):
    """Raised when no principal is present or credentials are rejected."""


class PayloadValidationError(ServiceError):
    """Raised when required fields are missing or malformed."""

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None) -> None:
        super().__init__(message)
        self.fields: List[str] = list(fields or [])


class NotFoundError(ServiceError):
    """Raised when the referenced record does not exist."""


class ConflictError(ServiceError):
    """Raised on uniqueness violations."""


class StorageError(ServiceError):
    """Raised when the store fails while performing the primary write."""


class AuditWriteError(Exception):
    """Audit row could not be written. Logged by the recorder, never propagated."""
