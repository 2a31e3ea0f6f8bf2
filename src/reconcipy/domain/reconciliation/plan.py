"""Pure change detection between a descriptor and the last-observed view."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Final

from reconcipy.domain.model import AssociationDiff, Lifecycle, diff, equal

if TYPE_CHECKING:
    from reconcipy.domain.model import (
        Descriptor,
        ObservedFields,
        ReconciledView,
        ResourceKind,
    )

    from .state import ResourceState

COMPARED_FIELDS: Final[tuple[str, ...]] = ("content", "comment", "type_tag", "associations")


class RepublishPolicy(StrEnum):
    """When ``update`` with ``publish=True`` issues a publish call.

    ``ON_CHANGE`` publishes only when the draft moved or the published stage lags
    behind it; ``ALWAYS`` publishes on every such update.
    """

    ON_CHANGE = "on-change"
    ALWAYS = "always"


class PlanAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    PUBLISH = "publish"
    NOOP = "noop"


@dataclass(frozen=True, slots=True)
class ReconcilePlan:
    action: PlanAction
    changed: tuple[str, ...] = ()
    associations: AssociationDiff = field(default_factory=AssociationDiff)
    publish: bool = False

    @property
    def mutates(self) -> bool:
        return self.action is PlanAction.CREATE or bool(self.changed)

    @property
    def remote_mutations(self) -> int:
        return int(self.mutates) + int(self.publish)


def changed_fields(observed: ObservedFields, descriptor: Descriptor) -> tuple[str, ...]:
    """Names of compared fields where ``descriptor`` differs from ``observed``."""

    changes: list[str] = []
    if (observed.content or "") != descriptor.content:
        changes.append("content")
    if (observed.comment or "") != (descriptor.comment or ""):
        changes.append("comment")
    if observed.type_tag != descriptor.type_tag:
        changes.append("type_tag")
    if not equal(observed.associations, descriptor.associations):
        changes.append("associations")
    return tuple(changes)


def published_is_current(view: ReconciledView) -> bool:
    published = view.published
    if published is None:
        return False
    draft = view.draft.fields
    current = published.fields
    return (
        (current.content or "") == (draft.content or "")
        and (current.comment or "") == (draft.comment or "")
        and current.type_tag == draft.type_tag
        and equal(current.associations, draft.associations)
    )


def plan_changes(
    kind: ResourceKind,
    state: ResourceState,
    descriptor: Descriptor,
    *,
    policy: RepublishPolicy = RepublishPolicy.ON_CHANGE,
) -> ReconcilePlan:
    wants_publish = descriptor.publish and kind.publishable

    if state.view is None or state.lifecycle is Lifecycle.ABSENT:
        return ReconcilePlan(
            action=PlanAction.CREATE,
            changed=COMPARED_FIELDS,
            associations=diff(None, descriptor.associations),
            publish=wants_publish,
        )

    view = state.view
    changed = changed_fields(view.draft.fields, descriptor)
    publish = wants_publish and (
        policy is RepublishPolicy.ALWAYS or bool(changed) or not published_is_current(view)
    )
    if changed:
        action = PlanAction.UPDATE
    elif publish:
        action = PlanAction.PUBLISH
    else:
        action = PlanAction.NOOP

    return ReconcilePlan(
        action=action,
        changed=changed,
        associations=diff(view.draft.fields.associations, descriptor.associations),
        publish=publish,
    )
