"""Settle-time polling for resources that provision asynchronously.

The reconciler never waits; callers invoke these helpers between reconciler calls,
e.g. after creating a cluster profile that stays ``CREATING`` for a few minutes.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from reconcipy.domain.errors import ErrorKind, NotFoundError, ReconcileError
from reconcipy.domain.reconciliation import ResourceState

if TYPE_CHECKING:
    from collections.abc import Callable, Collection

    from reconcipy.domain.model import Identity
    from reconcipy.domain.ports import CallOptions
    from reconcipy.domain.reconciliation import Reconciler

log = getLogger(__name__)


class WaitTimeoutError(ReconcileError):
    kind = ErrorKind.TRANSIENT


class UnexpectedStatusError(ReconcileError):
    """The resource settled in a status that is neither pending nor a target."""

    kind = ErrorKind.TRANSIENT

    def __init__(self, message: str, *, identity: Identity, status: str) -> None:
        super().__init__(message, identity=identity)
        self.status = status


@dataclass(frozen=True, slots=True)
class WaitPolicy:
    timeout_seconds: float = 600.0
    poll_interval_seconds: float = 10.0


def wait_for_status(
    reconciler: Reconciler,
    identity: Identity,
    *,
    target: Collection[str],
    pending: Collection[str] = (),
    policy: WaitPolicy | None = None,
    options: CallOptions | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> ResourceState:
    """Poll until the draft status is one of ``target``.

    When ``pending`` is given, any status outside ``pending`` and ``target`` fails
    immediately instead of waiting for the timeout.
    """

    effective = policy or WaitPolicy()
    deadline = clock() + effective.timeout_seconds
    while True:
        state = reconciler.read(identity, options=options)
        view = state.require_view("wait for")
        if view.status in target:
            log.info("%s %s reached %s", reconciler.kind.name, identity, view.status)
            return state
        if pending and view.status not in pending:
            raise UnexpectedStatusError(
                f"{reconciler.kind.name} {identity} is {view.status}, "
                f"expected one of: {', '.join(sorted(target))}",
                identity=identity,
                status=view.status,
            )
        if clock() >= deadline:
            raise WaitTimeoutError(
                f"Timed out after {effective.timeout_seconds:g}s waiting for "
                f"{reconciler.kind.name} {identity} (last status {view.status})",
                identity=identity,
                state=state,
            )
        log.debug("%s %s is %s, waiting", reconciler.kind.name, identity, view.status)
        sleep(effective.poll_interval_seconds)


def wait_until_absent(
    reconciler: Reconciler,
    identity: Identity,
    *,
    pending: Collection[str] = (),
    policy: WaitPolicy | None = None,
    options: CallOptions | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> ResourceState:
    """Poll until reading ``identity`` reports it gone (e.g. after ``DELETING``)."""

    effective = policy or WaitPolicy()
    deadline = clock() + effective.timeout_seconds
    while True:
        try:
            state = reconciler.read(identity, options=options)
        except NotFoundError:
            log.info("%s %s is gone", reconciler.kind.name, identity)
            return ResourceState.absent()
        view = state.require_view("wait for")
        if pending and view.status not in pending:
            raise UnexpectedStatusError(
                f"{reconciler.kind.name} {identity} is {view.status} while waiting for deletion",
                identity=identity,
                status=view.status,
            )
        if clock() >= deadline:
            raise WaitTimeoutError(
                f"Timed out after {effective.timeout_seconds:g}s waiting for "
                f"{reconciler.kind.name} {identity} to disappear (last status {view.status})",
                identity=identity,
                state=state,
            )
        sleep(effective.poll_interval_seconds)
