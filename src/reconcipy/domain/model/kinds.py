"""Static per-type rules: key shape, allowed type tags, and stage layout."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reconcipy.domain.errors import ValidationFailedError

from .associations import DEFAULT_KEY_FIELD
from .enums import Stage
from .identity import Identity

if TYPE_CHECKING:
    from .descriptor import Descriptor


@dataclass(frozen=True, slots=True)
class StageRule:
    """How one stage is resolved on read.

    A required stage fails the whole read when missing; an optional one is simply
    left out of the view. ``fetch_content`` issues a second call for the content
    blob when the remote stores it apart from the metadata.
    """

    stage: Stage
    required: bool = False
    fetch_content: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceKind:
    name: str
    key_fields: tuple[str, ...] = ("name",)
    type_tags: frozenset[str] | None = None
    stages: tuple[StageRule, ...] = (StageRule(Stage.DRAFT, required=True),)
    association_key_field: str = DEFAULT_KEY_FIELD

    def __post_init__(self) -> None:
        if not self.key_fields:
            raise ValueError(f"Resource kind {self.name} declares no key fields")
        first = self.stages[0] if self.stages else None
        if first is None or first.stage is not Stage.DRAFT or not first.required:
            raise ValueError(f"Resource kind {self.name} must resolve a required draft stage first")
        declared = [rule.stage for rule in self.stages]
        if len(set(declared)) != len(declared):
            raise ValueError(f"Resource kind {self.name} declares a stage twice")

    @property
    def publishable(self) -> bool:
        return any(rule.stage is Stage.PUBLISHED for rule in self.stages)

    def stage_rule(self, stage: Stage) -> StageRule | None:
        return next((rule for rule in self.stages if rule.stage is stage), None)

    def parse_identity(self, raw: str) -> Identity:
        return Identity.parse(raw, arity=len(self.key_fields))

    def validate(self, descriptor: Descriptor) -> None:
        """Reject descriptors whose problems are visible without a remote call."""

        identity = descriptor.identity
        if len(identity.parts) != len(self.key_fields):
            raise ValidationFailedError(
                f"{self.name} keys have {len(self.key_fields)} parts "
                f"({', '.join(self.key_fields)}), got {identity.key!r}",
                identity=identity,
            )
        if self.type_tags is not None and descriptor.type_tag not in self.type_tags:
            allowed = ", ".join(sorted(self.type_tags))
            raise ValidationFailedError(
                f"Type tag {descriptor.type_tag!r} is not allowed for {self.name} "
                f"(expected one of: {allowed})",
                identity=identity,
            )


EDGE_FUNCTION = ResourceKind(
    name="edge-function",
    type_tags=frozenset({"cloudfront-js-1.0", "cloudfront-js-2.0"}),
    stages=(
        StageRule(Stage.DRAFT, required=True, fetch_content=True),
        StageRule(Stage.PUBLISHED, required=False, fetch_content=True),
    ),
    association_key_field="key_value_store_arn",
)

CLUSTER_PROFILE = ResourceKind(
    name="cluster-profile",
    key_fields=("cluster_name", "profile_name"),
    stages=(StageRule(Stage.DRAFT, required=True, fetch_content=False),),
    association_key_field="subnet_id",
)

KINDS: dict[str, ResourceKind] = {kind.name: kind for kind in (EDGE_FUNCTION, CLUSTER_PROFILE)}


def get_kind(name: str) -> ResourceKind:
    try:
        return KINDS[name]
    except KeyError:
        known = ", ".join(sorted(KINDS))
        raise ValueError(f"Unknown resource kind {name!r} (known: {known})") from None
