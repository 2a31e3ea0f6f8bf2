"""Error taxonomy shared by the reconciler and every RemoteStore adapter.

Adapters translate their wire-level failures into these types at the boundary so
the reconciler never inspects transport details (status codes, error strings).
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .model.identity import Identity
    from .reconciliation.state import ResourceState


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    VALIDATION_FAILED = "validation_failed"
    TRANSIENT = "transient"
    ALREADY_EXISTS = "already_exists"
    PUBLISH_FAILED = "publish_failed"
    CANCELLED = "cancelled"
    INVALID_TRANSITION = "invalid_transition"


class ReconcileError(RuntimeError):
    """Base class for every failure surfaced by reconcipy.

    ``state`` is set when the remote side already confirmed part of the operation;
    callers should keep that state instead of the one they passed in.
    """

    kind: ErrorKind = ErrorKind.TRANSIENT

    def __init__(
        self,
        message: str,
        *,
        identity: Identity | None = None,
        state: ResourceState | None = None,
    ) -> None:
        super().__init__(message)
        self.identity = identity
        self.state = state


class NotFoundError(ReconcileError):
    """The object (or the requested stage of it) does not exist remotely."""

    kind = ErrorKind.NOT_FOUND

    def __init__(
        self,
        message: str,
        *,
        identity: Identity | None = None,
        state: ResourceState | None = None,
        gone: bool = False,
    ) -> None:
        super().__init__(message, identity=identity, state=state)
        self.gone = gone


class ConflictError(ReconcileError):
    """The supplied concurrency token no longer matches the remote stage."""

    kind = ErrorKind.CONFLICT


class ValidationFailedError(ReconcileError):
    """The descriptor (or a request derived from it) is malformed."""

    kind = ErrorKind.VALIDATION_FAILED


class DuplicateReferenceError(ValidationFailedError):
    """Two association records carry the same reference key."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Duplicate association reference key: {key}")
        self.key = key


class TransientAPIError(ReconcileError):
    """Any other remote failure (network, throttling, service fault)."""

    kind = ErrorKind.TRANSIENT


class AlreadyExistsError(ReconcileError):
    """Create was called for a natural key the store already holds."""

    kind = ErrorKind.ALREADY_EXISTS


class PublishFailedError(ReconcileError):
    """Publish failed after the draft was successfully written.

    The draft is real: ``state`` holds it and the caller should retry ``publish``
    rather than recreate.
    """

    kind = ErrorKind.PUBLISH_FAILED

    def __init__(
        self,
        message: str,
        *,
        cause: ReconcileError,
        identity: Identity | None = None,
        state: ResourceState | None = None,
    ) -> None:
        super().__init__(message, identity=identity, state=state)
        self.cause = cause


class OperationCancelledError(ReconcileError):
    kind = ErrorKind.CANCELLED


class LifecycleError(ReconcileError):
    """The requested operation is not valid in the current lifecycle state."""

    kind = ErrorKind.INVALID_TRANSITION


__all__ = [
    "AlreadyExistsError",
    "ConflictError",
    "DuplicateReferenceError",
    "ErrorKind",
    "LifecycleError",
    "NotFoundError",
    "OperationCancelledError",
    "PublishFailedError",
    "ReconcileError",
    "TransientAPIError",
    "ValidationFailedError",
]
