"""Per-stage materialized views of a remote object."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reconcipy.domain.errors import ValidationFailedError

from .enums import Lifecycle, Stage

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .descriptor import ObservedFields
    from .identity import Identity
    from .tokens import ConcurrencyToken


@dataclass(frozen=True, slots=True, kw_only=True)
class StageSnapshot:
    stage: Stage
    token: ConcurrencyToken
    status: str
    fields: ObservedFields

    def __post_init__(self) -> None:
        self.token.require_stage(self.stage)


@dataclass(frozen=True, slots=True, eq=False)
class ReconciledView:
    """Result of a read: the draft snapshot plus any later stages that exist."""

    identity: Identity
    snapshots: Mapping[Stage, StageSnapshot]

    def __post_init__(self) -> None:
        if Stage.DRAFT not in self.snapshots:
            raise ValidationFailedError(
                f"View of {self.identity} has no draft snapshot", identity=self.identity
            )

    @property
    def draft(self) -> StageSnapshot:
        return self.snapshots[Stage.DRAFT]

    @property
    def published(self) -> StageSnapshot | None:
        return self.snapshots.get(Stage.PUBLISHED)

    def snapshot(self, stage: Stage) -> StageSnapshot | None:
        return self.snapshots.get(stage)

    @property
    def resource_id(self) -> str | None:
        return self.draft.fields.resource_id

    @property
    def status(self) -> str:
        return self.draft.status

    @property
    def lifecycle(self) -> Lifecycle:
        if self.published is not None:
            return Lifecycle.DRAFT_AND_PUBLISHED
        return Lifecycle.DRAFT_ONLY

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReconciledView):
            return NotImplemented
        return self.identity == other.identity and dict(self.snapshots) == dict(other.snapshots)

    def __hash__(self) -> int:
        return hash((self.identity, frozenset(self.snapshots.items())))
