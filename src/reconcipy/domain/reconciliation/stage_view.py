"""Multi-stage read resolution.

Stages are resolved in the order the resource kind declares them. A required stage
(the draft) fails loudly when missing; optional stages are left out of the view.
A content fetch that follows a successful metadata read always fails the read.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from reconcipy.domain.errors import NotFoundError
from reconcipy.domain.model import ReconciledView, StageSnapshot

if TYPE_CHECKING:
    from reconcipy.domain.model import Identity, ResourceKind, Stage, StageRule
    from reconcipy.domain.ports import CallOptions, RemoteStore

log = getLogger(__name__)


@dataclass(slots=True)
class StageView:
    store: RemoteStore
    kind: ResourceKind

    def resolve(self, identity: Identity, *, options: CallOptions) -> ReconciledView:
        snapshots: dict[Stage, StageSnapshot] = {}
        for rule in self.kind.stages:
            snapshot = self._resolve_stage(identity, rule, options=options)
            if snapshot is not None:
                snapshots[rule.stage] = snapshot
        return ReconciledView(identity, snapshots)

    def _resolve_stage(
        self,
        identity: Identity,
        rule: StageRule,
        *,
        options: CallOptions,
    ) -> StageSnapshot | None:
        options.raise_if_cancelled(f"read {rule.stage} stage of {identity}")
        try:
            record = self.store.read_stage(self.kind, identity, rule.stage, options=options)
        except NotFoundError as exc:
            if rule.required:
                raise NotFoundError(
                    f"{self.kind.name} {identity} has no {rule.stage} stage",
                    identity=identity,
                ) from exc
            log.debug("%s %s has no %s stage", self.kind.name, identity, rule.stage)
            return None

        fields = record.fields
        if rule.fetch_content:
            options.raise_if_cancelled(f"read {rule.stage} content of {identity}")
            content = self.store.read_content(self.kind, identity, rule.stage, options=options)
            fields = fields.with_content(content)

        return StageSnapshot(
            stage=rule.stage,
            token=record.token,
            status=record.status,
            fields=fields,
        )
