"""Port consumed by the reconciler to talk to the remote store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from reconcipy.domain.errors import OperationCancelledError

if TYPE_CHECKING:
    from threading import Event

    from reconcipy.domain.model import (
        ConcurrencyToken,
        Descriptor,
        Identity,
        ObservedFields,
        ResourceKind,
        Stage,
    )
    from reconcipy.domain.reconciliation.state import ResourceState


@dataclass(frozen=True, slots=True)
class CallOptions:
    """Per-call timeout and cancellation signal.

    Adapters apply ``timeout_seconds`` to each request they send. The reconciler
    checks ``cancel_event`` before every remote call.
    """

    timeout_seconds: float | None = None
    cancel_event: Event | None = None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def raise_if_cancelled(self, operation: str, *, state: ResourceState | None = None) -> None:
        if self.cancelled:
            raise OperationCancelledError(
                f"{operation} cancelled before the remote call", state=state
            )


DEFAULT_CALL_OPTIONS = CallOptions()


@dataclass(frozen=True, slots=True)
class CreateResult:
    identity: Identity
    token: ConcurrencyToken
    status: str
    resource_id: str | None = None


@dataclass(frozen=True, slots=True)
class StageRecord:
    """Metadata of one stage. ``fields.content`` is set only when stored inline."""

    fields: ObservedFields
    token: ConcurrencyToken
    status: str


@runtime_checkable
class RemoteStore(Protocol):
    """Remote object store with stage-scoped optimistic concurrency.

    Every method raises the typed errors from ``reconcipy.domain.errors``:
    ``NotFoundError``, ``ConflictError``, ``ValidationFailedError``,
    ``AlreadyExistsError`` or ``TransientAPIError``.
    """

    def create(
        self, kind: ResourceKind, descriptor: Descriptor, *, options: CallOptions
    ) -> CreateResult: ...

    def read_stage(
        self, kind: ResourceKind, identity: Identity, stage: Stage, *, options: CallOptions
    ) -> StageRecord: ...

    def read_content(
        self, kind: ResourceKind, identity: Identity, stage: Stage, *, options: CallOptions
    ) -> str: ...

    def update(
        self,
        kind: ResourceKind,
        identity: Identity,
        descriptor: Descriptor,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> ConcurrencyToken: ...

    def publish(
        self,
        kind: ResourceKind,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> ConcurrencyToken: ...

    def delete(
        self,
        kind: ResourceKind,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> None: ...
