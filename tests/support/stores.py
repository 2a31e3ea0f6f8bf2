"""Reusable store wrappers and descriptor builders for reconciler tests."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from reconcipy.adapters.memory import InMemoryRemoteStore
from reconcipy.domain.model import AssociationSet, Descriptor

if TYPE_CHECKING:
    from reconcipy.domain.errors import ReconcileError
    from reconcipy.domain.model import ConcurrencyToken, Identity, ResourceKind, Stage
    from reconcipy.domain.ports import CallOptions, CreateResult, StageRecord


def make_function(
    name: str = "rewrite-index",
    *,
    content: str = "function handler(event) { return event.request; }",
    comment: str | None = "append index.html",
    type_tag: str | None = "cloudfront-js-2.0",
    publish: bool = True,
    associations: AssociationSet | None = None,
) -> Descriptor:
    return Descriptor(
        name=name,
        content=content,
        comment=comment,
        type_tag=type_tag,
        publish=publish,
        associations=associations or AssociationSet(),
    )


def make_profile(
    cluster: str = "analytics",
    name: str = "batch",
    *,
    subnets: tuple[str, ...] = ("subnet-a", "subnet-b"),
) -> Descriptor:
    return Descriptor(
        name=name,
        scope=(cluster,),
        publish=False,
        associations=AssociationSet.of(*subnets),
    )


class FlakyStore(InMemoryRemoteStore):
    """In-memory store that raises queued errors from chosen methods.

    ``fail_next("publish", TransientAPIError(...))`` makes the next publish call
    raise before touching any stored object.
    """

    def __init__(self, **kwargs: str) -> None:
        super().__init__(**kwargs)
        self._failures: defaultdict[str, list[ReconcileError]] = defaultdict(list)

    def fail_next(self, method: str, error: ReconcileError) -> None:
        self._failures[method].append(error)

    def _maybe_fail(self, method: str) -> None:
        queued = self._failures.get(method)
        if queued:
            raise queued.pop(0)

    def create(
        self, kind: ResourceKind, descriptor: Descriptor, *, options: CallOptions
    ) -> CreateResult:
        self._maybe_fail("create")
        return super().create(kind, descriptor, options=options)

    def read_stage(
        self, kind: ResourceKind, identity: Identity, stage: Stage, *, options: CallOptions
    ) -> StageRecord:
        self._maybe_fail("read_stage")
        return super().read_stage(kind, identity, stage, options=options)

    def read_content(
        self, kind: ResourceKind, identity: Identity, stage: Stage, *, options: CallOptions
    ) -> str:
        self._maybe_fail("read_content")
        return super().read_content(kind, identity, stage, options=options)

    def publish(
        self,
        kind: ResourceKind,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> ConcurrencyToken:
        self._maybe_fail("publish")
        return super().publish(kind, identity, token, options=options)

    def delete(
        self,
        kind: ResourceKind,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> None:
        self._maybe_fail("delete")
        super().delete(kind, identity, token, options=options)
