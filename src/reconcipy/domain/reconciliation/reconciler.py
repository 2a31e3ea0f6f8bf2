"""Create/read/update/publish/delete/import for one identity at a time.

The reconciler holds no per-identity state or lock. Callers pass in the
``ResourceState`` they last received and get a new one back only after the remote
store confirmed the operation. When an operation fails after the remote side
already changed (e.g. publish after a successful create), the raised error carries
that confirmed state in ``error.state``.

No call is retried here: a stale token surfaces as ``ConflictError`` and transient
failures propagate unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from reconcipy.domain.errors import (
    NotFoundError,
    OperationCancelledError,
    PublishFailedError,
    ReconcileError,
    ValidationFailedError,
)
from reconcipy.domain.model import ReconciledView, Stage, StageSnapshot
from reconcipy.domain.ports import DEFAULT_CALL_OPTIONS

from .plan import PlanAction, ReconcilePlan, RepublishPolicy, plan_changes
from .stage_view import StageView
from .state import ResourceState

if TYPE_CHECKING:
    from reconcipy.domain.model import (
        ConcurrencyToken,
        Descriptor,
        Identity,
        ObservedFields,
        ResourceKind,
    )
    from reconcipy.domain.ports import CallOptions, RemoteStore

log = getLogger(__name__)


def _draft_state(
    identity: Identity,
    *,
    token: ConcurrencyToken,
    status: str,
    fields: ObservedFields,
) -> ResourceState:
    snapshot = StageSnapshot(stage=Stage.DRAFT, token=token, status=status, fields=fields)
    return ResourceState(ReconciledView(identity, {Stage.DRAFT: snapshot}))


@dataclass(slots=True)
class Reconciler:
    """Drive one resource kind against an injected remote store."""

    store: RemoteStore
    kind: ResourceKind
    republish: RepublishPolicy = RepublishPolicy.ON_CHANGE
    _stage_view: StageView = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._stage_view = StageView(self.store, self.kind)

    def read(self, identity: Identity, *, options: CallOptions | None = None) -> ResourceState:
        """Refresh a previously observed identity.

        Raises ``NotFoundError`` with ``gone=True`` when the draft stage no longer
        exists; the caller should drop the identity.
        """

        opts = options or DEFAULT_CALL_OPTIONS
        try:
            view = self._stage_view.resolve(identity, options=opts)
        except NotFoundError as exc:
            log.warning("%s %s not found, removing from state", self.kind.name, identity)
            raise NotFoundError(
                str(exc),
                identity=identity,
                state=ResourceState.absent(),
                gone=True,
            ) from exc
        return ResourceState(view)

    def import_resource(
        self,
        raw_key: str,
        *,
        options: CallOptions | None = None,
    ) -> ResourceState:
        """Hydrate state from a natural-key string; a missing object yields Absent."""

        opts = options or DEFAULT_CALL_OPTIONS
        identity = self.kind.parse_identity(raw_key)
        try:
            view = self._stage_view.resolve(identity, options=opts)
        except NotFoundError:
            log.info("%s %s does not exist, nothing to import", self.kind.name, identity)
            return ResourceState.absent()
        log.info("Imported %s %s (%s)", self.kind.name, identity, view.lifecycle)
        return ResourceState(view)

    def plan(self, state: ResourceState, descriptor: Descriptor) -> ReconcilePlan:
        self.kind.validate(descriptor)
        if state.identity is not None and descriptor.identity != state.identity:
            raise ValidationFailedError(
                f"Natural key of {self.kind.name} {state.identity} is immutable, "
                f"got {descriptor.identity}; delete and create instead",
                identity=state.identity,
            )
        return plan_changes(self.kind, state, descriptor, policy=self.republish)

    def apply(
        self,
        state: ResourceState,
        descriptor: Descriptor,
        *,
        options: CallOptions | None = None,
    ) -> ResourceState:
        if state.view is None:
            return self.create(descriptor, options=options)
        return self.update(state, descriptor, options=options)

    def create(
        self,
        descriptor: Descriptor,
        *,
        options: CallOptions | None = None,
    ) -> ResourceState:
        opts = options or DEFAULT_CALL_OPTIONS
        self.kind.validate(descriptor)

        opts.raise_if_cancelled(f"create {self.kind.name} {descriptor.identity}")
        log.debug("Creating %s %s", self.kind.name, descriptor.identity)
        result = self.store.create(self.kind, descriptor, options=opts)
        log.info("Created %s %s", self.kind.name, result.identity)

        state = _draft_state(
            result.identity,
            token=result.token,
            status=result.status,
            fields=descriptor.observed(resource_id=result.resource_id),
        )
        if descriptor.publish and self.kind.publishable:
            self._publish_after_write(state, options=opts)
        return self._refresh(state, options=opts)

    def update(
        self,
        state: ResourceState,
        descriptor: Descriptor,
        *,
        options: CallOptions | None = None,
    ) -> ResourceState:
        """Write the descriptor only when it differs from the observed draft."""

        opts = options or DEFAULT_CALL_OPTIONS
        view = state.require_view("update")
        plan = self.plan(state, descriptor)
        if plan.action is PlanAction.NOOP:
            log.debug("%s %s is up to date", self.kind.name, view.identity)
            return state

        current = state
        if plan.changed:
            opts.raise_if_cancelled(f"update {self.kind.name} {view.identity}")
            log.info(
                "Updating %s %s (changed: %s)",
                self.kind.name,
                view.identity,
                ", ".join(plan.changed),
            )
            token = self.store.update(
                self.kind, view.identity, descriptor, view.draft.token, options=opts
            )
            current = _draft_state(
                view.identity,
                token=token,
                status=view.draft.status,
                fields=descriptor.observed(resource_id=view.resource_id),
            )

        if plan.publish:
            if plan.changed:
                self._publish_after_write(current, options=opts)
            else:
                self._issue_publish(current, options=opts)
        return self._refresh(current, options=opts)

    def publish(
        self,
        state: ResourceState,
        *,
        options: CallOptions | None = None,
    ) -> ResourceState:
        """Promote the current draft; also the retry path after ``PublishFailedError``."""

        opts = options or DEFAULT_CALL_OPTIONS
        state.require_view("publish")
        if not self.kind.publishable:
            raise ValidationFailedError(
                f"{self.kind.name} has no {Stage.PUBLISHED} stage", identity=state.identity
            )
        self._issue_publish(state, options=opts)
        return self._refresh(state, options=opts)

    def delete(
        self,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions | None = None,
    ) -> ResourceState:
        """Delete ``identity``; an object that is already gone counts as deleted."""

        opts = options or DEFAULT_CALL_OPTIONS
        token.require_stage(Stage.DRAFT)
        opts.raise_if_cancelled(f"delete {self.kind.name} {identity}")
        log.info("Deleting %s %s", self.kind.name, identity)
        try:
            self.store.delete(self.kind, identity, token, options=opts)
        except NotFoundError:
            log.info("%s %s already deleted", self.kind.name, identity)
        return ResourceState.absent()

    def _issue_publish(self, state: ResourceState, *, options: CallOptions) -> ConcurrencyToken:
        view = state.require_view("publish")
        options.raise_if_cancelled(f"publish {self.kind.name} {view.identity}", state=state)
        log.info("Publishing %s %s", self.kind.name, view.identity)
        return self.store.publish(self.kind, view.identity, view.draft.token, options=options)

    def _publish_after_write(self, state: ResourceState, *, options: CallOptions) -> None:
        try:
            self._issue_publish(state, options=options)
        except OperationCancelledError:
            raise
        except ReconcileError as exc:
            log.error("Publishing %s %s failed: %s", self.kind.name, state.identity, exc)
            raise PublishFailedError(
                f"publishing {self.kind.name} ({state.identity}): {exc}",
                cause=exc,
                identity=state.identity,
                state=state,
            ) from exc

    def _refresh(self, state: ResourceState, *, options: CallOptions) -> ResourceState:
        view = state.require_view("read")
        try:
            return ResourceState(self._stage_view.resolve(view.identity, options=options))
        except ReconcileError as exc:
            # the write already happened; hand the caller the state it produced
            if exc.state is None:
                exc.state = state
            raise
