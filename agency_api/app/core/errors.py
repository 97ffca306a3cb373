"""
Structured errors raised by the service layer.

Every failure that should reach an API client is a ``ServiceError``
carrying an ``ErrorKind``.  Endpoints never inspect message text; the
exception handler registered in ``main.create_app`` translates the
kind into an HTTP status through ``STATUS_BY_KIND``.  Messages are
returned to the client verbatim.
"""

import sqlite3
from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    CONFLICT = "conflict"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.CONFLICT: 409,
    ErrorKind.TIMEOUT: 503,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationFailed(ServiceError):
    """Bad or missing input, or an operation invalid in the current state."""

    kind = ErrorKind.VALIDATION


class NotFoundError(ServiceError):
    kind = ErrorKind.NOT_FOUND


class ForbiddenError(ServiceError):
    """The caller is authenticated but the policy denies the operation."""

    kind = ErrorKind.FORBIDDEN


class UnauthorizedError(ServiceError):
    kind = ErrorKind.UNAUTHORIZED


class ConflictError(ServiceError):
    kind = ErrorKind.CONFLICT


class StorageTimeout(ServiceError):
    kind = ErrorKind.TIMEOUT


class StorageError(ServiceError):
    kind = ErrorKind.INTERNAL


def wrap_storage_error(exc: sqlite3.Error, context: str) -> ServiceError:
    """Convert a driver exception into a ``ServiceError`` with context.

    A locked database after the configured timeout becomes
    ``StorageTimeout``; anything else becomes ``StorageError``.
    """
    if isinstance(exc, sqlite3.OperationalError) and "locked" in str(exc).lower():
        return StorageTimeout(f"{context}: storage timed out")
    return StorageError(f"{context}: {exc}")
