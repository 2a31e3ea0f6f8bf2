"""Process-local RemoteStore with the same token and stage rules as a real service.

Useful for dry runs and as the reference behaviour other adapters are tested
against. Every call is recorded in ``calls`` so callers can assert which remote
verbs an operation issued.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final
from uuid import uuid4

from reconcipy.domain.errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from reconcipy.domain.model import ConcurrencyToken, Identity, ObservedFields, Stage
from reconcipy.domain.ports import CreateResult, RemoteStore, StageRecord

if TYPE_CHECKING:
    from reconcipy.domain.model import Descriptor, ResourceKind
    from reconcipy.domain.ports import CallOptions

log = getLogger(__name__)

MUTATING_METHODS: Final[frozenset[str]] = frozenset({"create", "update", "publish", "delete"})


@dataclass(frozen=True, slots=True)
class StoreCall:
    method: str
    kind: str
    identity: Identity
    stage: Stage | None = None


@dataclass(slots=True)
class _StoredStage:
    fields: ObservedFields
    token: ConcurrencyToken
    status: str


@dataclass(slots=True)
class _StoredObject:
    identity: Identity
    resource_id: str
    stages: dict[Stage, _StoredStage] = field(default_factory=dict[Stage, _StoredStage])


def _new_token(stage: Stage) -> ConcurrencyToken:
    return ConcurrencyToken(f"E{uuid4().hex[:13].upper()}", stage)


class InMemoryRemoteStore:
    """Dictionary-backed store keyed by ``(kind name, identity)``."""

    def __init__(
        self,
        *,
        create_status: str = "UNPUBLISHED",
        published_status: str = "UNASSOCIATED",
        id_prefix: str = "arn:reconcipy",
    ) -> None:
        self.create_status = create_status
        self.published_status = published_status
        self.id_prefix = id_prefix
        self.calls: list[StoreCall] = []
        self._objects: dict[tuple[str, Identity], _StoredObject] = {}
        self._lock = threading.Lock()

    @property
    def mutation_calls(self) -> list[StoreCall]:
        return [call for call in self.calls if call.method in MUTATING_METHODS]

    def create(
        self, kind: ResourceKind, descriptor: Descriptor, *, options: CallOptions
    ) -> CreateResult:
        del options
        identity = descriptor.identity
        self._record("create", kind, identity)
        kind.validate(descriptor)
        with self._lock:
            if (kind.name, identity) in self._objects:
                raise AlreadyExistsError(
                    f"{kind.name} {identity} already exists", identity=identity
                )
            resource_id = f"{self.id_prefix}:{kind.name}/{identity.key}"
            token = _new_token(Stage.DRAFT)
            stored = _StoredObject(identity=identity, resource_id=resource_id)
            stored.stages[Stage.DRAFT] = _StoredStage(
                fields=descriptor.observed(resource_id=resource_id),
                token=token,
                status=self.create_status,
            )
            self._objects[(kind.name, identity)] = stored
        return CreateResult(
            identity=identity,
            token=token,
            status=self.create_status,
            resource_id=resource_id,
        )

    def read_stage(
        self, kind: ResourceKind, identity: Identity, stage: Stage, *, options: CallOptions
    ) -> StageRecord:
        del options
        self._record("read_stage", kind, identity, stage)
        with self._lock:
            stored = self._stage(kind, identity, stage)
            rule = kind.stage_rule(stage)
            fields = stored.fields
            if rule is not None and rule.fetch_content:
                fields = ObservedFields(
                    comment=fields.comment,
                    type_tag=fields.type_tag,
                    associations=fields.associations,
                    resource_id=fields.resource_id,
                )
            return StageRecord(fields=fields, token=stored.token, status=stored.status)

    def read_content(
        self, kind: ResourceKind, identity: Identity, stage: Stage, *, options: CallOptions
    ) -> str:
        del options
        self._record("read_content", kind, identity, stage)
        with self._lock:
            return self._stage(kind, identity, stage).fields.content or ""

    def update(
        self,
        kind: ResourceKind,
        identity: Identity,
        descriptor: Descriptor,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> ConcurrencyToken:
        del options
        self._record("update", kind, identity, Stage.DRAFT)
        kind.validate(descriptor)
        with self._lock:
            stored = self._object(kind, identity)
            draft = self._check_token(stored, Stage.DRAFT, token)
            new_token = _new_token(Stage.DRAFT)
            stored.stages[Stage.DRAFT] = _StoredStage(
                fields=descriptor.observed(resource_id=stored.resource_id),
                token=new_token,
                status=self.create_status if kind.publishable else draft.status,
            )
            return new_token

    def publish(
        self,
        kind: ResourceKind,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> ConcurrencyToken:
        del options
        self._record("publish", kind, identity, Stage.PUBLISHED)
        if not kind.publishable:
            raise ValidationFailedError(f"{kind.name} cannot be published", identity=identity)
        with self._lock:
            stored = self._object(kind, identity)
            draft = self._check_token(stored, Stage.DRAFT, token)
            # the published stage carries the token of the draft it was promoted from
            published_token = ConcurrencyToken(draft.token.value, Stage.PUBLISHED)
            stored.stages[Stage.PUBLISHED] = _StoredStage(
                fields=draft.fields,
                token=published_token,
                status=self.published_status,
            )
            draft.status = self.published_status
            return published_token

    def delete(
        self,
        kind: ResourceKind,
        identity: Identity,
        token: ConcurrencyToken,
        *,
        options: CallOptions,
    ) -> None:
        del options
        self._record("delete", kind, identity, Stage.DRAFT)
        with self._lock:
            stored = self._object(kind, identity)
            self._check_token(stored, Stage.DRAFT, token)
            del self._objects[(kind.name, identity)]

    def remove(self, kind: ResourceKind, identity: Identity) -> None:
        """Delete an object out-of-band, bypassing the token check."""

        with self._lock:
            self._objects.pop((kind.name, identity), None)

    def set_status(self, kind: ResourceKind, identity: Identity, status: str) -> None:
        """Move the draft status, as asynchronous provisioning on a real service would."""

        with self._lock:
            self._stage(kind, identity, Stage.DRAFT).status = status

    def _record(
        self,
        method: str,
        kind: ResourceKind,
        identity: Identity,
        stage: Stage | None = None,
    ) -> None:
        log.debug("%s %s %s %s", method, kind.name, identity, stage or "")
        self.calls.append(StoreCall(method=method, kind=kind.name, identity=identity, stage=stage))

    def _object(self, kind: ResourceKind, identity: Identity) -> _StoredObject:
        stored = self._objects.get((kind.name, identity))
        if stored is None:
            raise NotFoundError(f"No such {kind.name}: {identity}", identity=identity)
        return stored

    def _stage(self, kind: ResourceKind, identity: Identity, stage: Stage) -> _StoredStage:
        stored = self._object(kind, identity).stages.get(stage)
        if stored is None:
            raise NotFoundError(f"{kind.name} {identity} has no {stage} stage", identity=identity)
        return stored

    @staticmethod
    def _check_token(
        stored: _StoredObject,
        stage: Stage,
        token: ConcurrencyToken,
    ) -> _StoredStage:
        current = stored.stages[stage]
        if token.stage is not stage or token.value != current.token.value:
            raise ConflictError(
                f"Token {token} does not match the current {stage} token of {stored.identity}",
                identity=stored.identity,
            )
        return current


if TYPE_CHECKING:
    _store_check: RemoteStore = InMemoryRemoteStore()
