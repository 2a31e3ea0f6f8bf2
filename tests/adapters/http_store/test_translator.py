from __future__ import annotations

import httpx
import pytest

from reconcipy.adapters.http_store.translator import (
    descriptor_payload,
    parse_create_response,
    token_from_response,
)
from reconcipy.domain.errors import TransientAPIError
from reconcipy.domain.model import CLUSTER_PROFILE, EDGE_FUNCTION, Identity, Stage
from tests.support.stores import make_function, make_profile

REQUEST = httpx.Request("GET", "https://store.example/edge-function/rewrite-index")


def test_payload_uses_wire_aliases_and_drops_unset_fields() -> None:
    payload = descriptor_payload(EDGE_FUNCTION, make_function(comment=None))

    assert payload == {
        "name": "rewrite-index",
        "scope": [],
        "content": make_function().content,
        "type": "cloudfront-js-2.0",
    }


def test_payload_flattens_associations_with_kind_key_field() -> None:
    payload = descriptor_payload(CLUSTER_PROFILE, make_profile(subnets=("subnet-a",)))

    assert payload["scope"] == ["analytics"]
    assert payload["associations"] == [{"subnet_id": "subnet-a"}]


def test_create_response_parses_composite_key() -> None:
    response = httpx.Response(
        201,
        json={"key": "analytics:batch", "status": "CREATING", "unexpected": True},
        headers={"ETag": "E9"},
        request=REQUEST,
    )

    result = parse_create_response(CLUSTER_PROFILE, response, stage=Stage.DRAFT)

    assert result.identity == Identity.of("analytics", "batch")
    assert result.status == "CREATING"
    assert result.resource_id is None


def test_token_requires_etag() -> None:
    with pytest.raises(TransientAPIError):
        token_from_response(httpx.Response(200, request=REQUEST), Stage.DRAFT)
