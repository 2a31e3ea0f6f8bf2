"""Application orchestration entry points.

Each function reconciles one identity end to end: it hydrates the current state
from the remote store (there is no local state file) and then issues the
reconciler operation. Pass ``reconciler`` to bypass configuration loading.
"""

from __future__ import annotations

from contextlib import contextmanager
from logging import getLogger
from typing import TYPE_CHECKING

from reconcipy.adapters.http_store import HttpRemoteStore
from reconcipy.config import get_remote_store_config
from reconcipy.domain.model import flatten
from reconcipy.domain.reconciliation import Reconciler, RepublishPolicy, ResourceState
from reconcipy.waiters import WaitPolicy, wait_for_status, wait_until_absent

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator

    from reconcipy.config import RemoteStoreConfig
    from reconcipy.domain.model import Descriptor, ResourceKind, StageSnapshot
    from reconcipy.domain.ports import CallOptions, RemoteStore
    from reconcipy.domain.reconciliation import ReconcilePlan

log = getLogger(__name__)


def build_reconciler(
    kind: ResourceKind,
    *,
    store: RemoteStore | None = None,
    config: RemoteStoreConfig | None = None,
) -> Reconciler:
    """Wire a reconciler for ``kind``; defaults to the HTTP store from the environment."""

    if store is None:
        effective_config = config or get_remote_store_config()
        store = HttpRemoteStore(resilience=effective_config.resilience)
        return Reconciler(store=store, kind=kind, republish=effective_config.republish)
    republish = config.republish if config is not None else RepublishPolicy.ON_CHANGE
    return Reconciler(store=store, kind=kind, republish=republish)


@contextmanager
def _reconciler_for(kind: ResourceKind, reconciler: Reconciler | None) -> Iterator[Reconciler]:
    """Yield ``reconciler`` or a freshly built one, closing an HTTP store built here."""

    if reconciler is not None:
        yield reconciler
        return
    built = build_reconciler(kind)
    try:
        yield built
    finally:
        if isinstance(built.store, HttpRemoteStore):
            built.store.close()


def _describe_snapshot(kind: ResourceKind, snapshot: StageSnapshot) -> dict[str, object]:
    fields = snapshot.fields
    return {
        "token": snapshot.token.value,
        "status": snapshot.status,
        "comment": fields.comment,
        "type": fields.type_tag,
        "content_length": len(fields.content) if fields.content is not None else None,
        "associations": sorted(
            flatten(fields.associations, key_field=kind.association_key_field),
            key=lambda item: item[kind.association_key_field],
        ),
    }


def describe_state(kind: ResourceKind, state: ResourceState) -> dict[str, object]:
    """JSON-serialisable summary of ``state`` for CLI output."""

    view = state.view
    if view is None:
        return {"kind": kind.name, "lifecycle": state.lifecycle.value}
    return {
        "kind": kind.name,
        "key": view.identity.key,
        "resource_id": view.resource_id,
        "lifecycle": state.lifecycle.value,
        "status": view.status,
        "stages": {
            stage.value: _describe_snapshot(kind, snapshot)
            for stage, snapshot in view.snapshots.items()
        },
    }


def read_resource(
    kind: ResourceKind,
    key: str,
    *,
    reconciler: Reconciler | None = None,
    options: CallOptions | None = None,
) -> ResourceState:
    with _reconciler_for(kind, reconciler) as effective:
        return effective.read(kind.parse_identity(key), options=options)


def import_resource(
    kind: ResourceKind,
    key: str,
    *,
    reconciler: Reconciler | None = None,
    options: CallOptions | None = None,
) -> ResourceState:
    with _reconciler_for(kind, reconciler) as effective:
        return effective.import_resource(key, options=options)


def plan_resource(
    kind: ResourceKind,
    descriptor: Descriptor,
    *,
    reconciler: Reconciler | None = None,
    options: CallOptions | None = None,
) -> tuple[ResourceState, ReconcilePlan]:
    with _reconciler_for(kind, reconciler) as effective:
        state = effective.import_resource(descriptor.identity.key, options=options)
        return state, effective.plan(state, descriptor)


def apply_resource(
    kind: ResourceKind,
    descriptor: Descriptor,
    *,
    reconciler: Reconciler | None = None,
    options: CallOptions | None = None,
) -> ResourceState:
    with _reconciler_for(kind, reconciler) as effective:
        state = effective.import_resource(descriptor.identity.key, options=options)
        log.info(
            "Applying %s %s (currently %s)", kind.name, descriptor.identity, state.lifecycle
        )
        return effective.apply(state, descriptor, options=options)


def publish_resource(
    kind: ResourceKind,
    key: str,
    *,
    reconciler: Reconciler | None = None,
    options: CallOptions | None = None,
) -> ResourceState:
    with _reconciler_for(kind, reconciler) as effective:
        state = effective.read(kind.parse_identity(key), options=options)
        return effective.publish(state, options=options)


def delete_resource(
    kind: ResourceKind,
    key: str,
    *,
    reconciler: Reconciler | None = None,
    options: CallOptions | None = None,
) -> ResourceState:
    with _reconciler_for(kind, reconciler) as effective:
        state = effective.import_resource(key, options=options)
        if state.view is None:
            log.info("%s %s does not exist, nothing to delete", kind.name, key)
            return state
        return effective.delete(state.view.identity, state.view.draft.token, options=options)


def wait_for_resource(
    kind: ResourceKind,
    key: str,
    *,
    target: Collection[str] = (),
    pending: Collection[str] = (),
    until_absent: bool = False,
    policy: WaitPolicy | None = None,
    reconciler: Reconciler | None = None,
    options: CallOptions | None = None,
) -> ResourceState:
    identity = kind.parse_identity(key)
    if not until_absent and not target:
        raise ValueError("Waiting for a status requires at least one target status")
    with _reconciler_for(kind, reconciler) as effective:
        if until_absent:
            return wait_until_absent(
                effective, identity, pending=pending, policy=policy, options=options
            )
        return wait_for_status(
            effective, identity, target=target, pending=pending, policy=policy, options=options
        )
