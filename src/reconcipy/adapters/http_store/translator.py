"""Translate between wire payloads and domain types."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from reconcipy.domain.errors import TransientAPIError
from reconcipy.domain.model import ConcurrencyToken, ObservedFields, expand, flatten
from reconcipy.domain.ports import CreateResult, StageRecord

from .schema import CreateResponse, DescriptorPayload, StageResponse

if TYPE_CHECKING:
    import httpx
    from pydantic import BaseModel

    from reconcipy.domain.model import Descriptor, Identity, ResourceKind, Stage

ETAG_HEADER = "ETag"

TModel = TypeVar("TModel", bound="BaseModel")


def _validate(model: type[TModel], response: httpx.Response) -> TModel:
    try:
        return model.model_validate(response.json())
    except ValueError as exc:
        # pydantic.ValidationError and JSON decode errors are both ValueErrors
        raise TransientAPIError(
            f"Unexpected {model.__name__} payload from {response.request.url}: {exc}"
        ) from exc


def descriptor_payload(kind: ResourceKind, descriptor: Descriptor) -> dict[str, object]:
    associations = flatten(descriptor.associations, key_field=kind.association_key_field)
    payload = DescriptorPayload(
        name=descriptor.name,
        scope=list(descriptor.scope),
        content=descriptor.content,
        comment=descriptor.comment,
        type_tag=descriptor.type_tag,
        # an empty set goes over the wire as an absent field
        associations=associations or None,
    )
    return payload.model_dump(by_alias=True, exclude_none=True)


def token_from_response(response: httpx.Response, stage: Stage) -> ConcurrencyToken:
    value = response.headers.get(ETAG_HEADER)
    if not value:
        raise TransientAPIError(
            f"{response.request.method} {response.request.url} returned no {ETAG_HEADER} header"
        )
    return ConcurrencyToken(value, stage)


def parse_create_response(
    kind: ResourceKind,
    response: httpx.Response,
    *,
    stage: Stage,
) -> CreateResult:
    payload = _validate(CreateResponse, response)
    return CreateResult(
        identity=kind.parse_identity(payload.key),
        token=token_from_response(response, stage),
        status=payload.status,
        resource_id=payload.resource_id,
    )


def parse_stage_response(
    kind: ResourceKind,
    identity: Identity,
    response: httpx.Response,
    *,
    stage: Stage,
) -> StageRecord:
    payload = _validate(StageResponse, response)
    if payload.key != identity.key:
        raise TransientAPIError(
            f"Requested {identity} but the store answered for {payload.key}",
            identity=identity,
        )
    fields = ObservedFields(
        content=payload.content,
        comment=payload.comment,
        type_tag=payload.type_tag,
        associations=expand(payload.associations, key_field=kind.association_key_field),
        resource_id=payload.resource_id,
    )
    return StageRecord(
        fields=fields,
        token=token_from_response(response, stage),
        status=payload.status,
    )
