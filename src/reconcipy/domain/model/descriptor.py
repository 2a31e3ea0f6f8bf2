"""Desired-state payloads and their last-observed remote counterparts."""

from __future__ import annotations

from dataclasses import dataclass, field

from .associations import AssociationSet, normalize
from .identity import Identity


@dataclass(frozen=True, slots=True, kw_only=True)
class Descriptor:
    """Caller-declared desired state for one resource."""

    name: str
    content: str = ""
    comment: str | None = None
    type_tag: str | None = None
    publish: bool = True
    associations: AssociationSet = field(default_factory=AssociationSet)
    scope: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Absent and empty association sets are the same value.
        object.__setattr__(self, "associations", normalize(self.associations))

    @property
    def identity(self) -> Identity:
        return Identity((*self.scope, self.name))

    def observed(self, *, resource_id: str | None = None) -> ObservedFields:
        return ObservedFields(
            content=self.content,
            comment=self.comment,
            type_tag=self.type_tag,
            associations=self.associations,
            resource_id=resource_id,
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class ObservedFields:
    """Descriptor fields as last observed on one remote stage.

    ``content`` is ``None`` when the stage was read without its content.
    """

    content: str | None = None
    comment: str | None = None
    type_tag: str | None = None
    associations: AssociationSet = field(default_factory=AssociationSet)
    resource_id: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "associations", normalize(self.associations))

    def with_content(self, content: str) -> ObservedFields:
        return ObservedFields(
            content=content,
            comment=self.comment,
            type_tag=self.type_tag,
            associations=self.associations,
            resource_id=self.resource_id,
        )
