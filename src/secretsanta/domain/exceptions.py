"""Errors raised by the SecretSanta domain services.

Every failure of a service operation is a ``SecretSantaError`` carrying an
``ErrorKind`` and a human-readable detail. The HTTP layer is the only place
that turns a kind into a status code.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a domain failure."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FORBIDDEN = "forbidden"
    INVALID_STATE = "invalid_state"
    PRECONDITION_FAILED = "precondition_failed"
    INTERNAL = "internal"


class SecretSantaError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(SecretSantaError):
    """Raised when a referenced user, group, membership or assignment is missing."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(SecretSantaError):
    """Raised when a natural key is already taken."""

    kind = ErrorKind.CONFLICT


class ForbiddenError(SecretSantaError):
    """Raised when the actor lacks the role required for an operation."""

    kind = ErrorKind.FORBIDDEN


class InvalidStateError(SecretSantaError):
    """Raised when the group state does not allow the operation."""

    kind = ErrorKind.INVALID_STATE


class PreconditionFailedError(SecretSantaError):
    """Raised when an operation would break a structural invariant."""

    kind = ErrorKind.PRECONDITION_FAILED


class StorageError(SecretSantaError):
    """Raised when the storage layer fails for a reason other than uniqueness."""

    kind = ErrorKind.INTERNAL
