from __future__ import annotations

import pytest

from reconcipy.adapters.memory import InMemoryRemoteStore
from reconcipy.domain.errors import (
    AlreadyExistsError,
    ConflictError,
    NotFoundError,
    ValidationFailedError,
)
from reconcipy.domain.model import CLUSTER_PROFILE, EDGE_FUNCTION, Identity, Stage
from reconcipy.domain.ports import DEFAULT_CALL_OPTIONS, RemoteStore
from tests.support.stores import make_function, make_profile

IDENTITY = Identity.of("rewrite-index")


def test_memory_store_satisfies_port() -> None:
    assert isinstance(InMemoryRemoteStore(), RemoteStore)


def test_create_issues_draft_token_and_status() -> None:
    store = InMemoryRemoteStore()

    result = store.create(EDGE_FUNCTION, make_function(), options=DEFAULT_CALL_OPTIONS)

    assert result.identity == IDENTITY
    assert result.token.stage is Stage.DRAFT
    assert result.status == "UNPUBLISHED"
    assert result.resource_id == "arn:reconcipy:edge-function/rewrite-index"


def test_create_twice_is_rejected() -> None:
    store = InMemoryRemoteStore()
    store.create(EDGE_FUNCTION, make_function(), options=DEFAULT_CALL_OPTIONS)

    with pytest.raises(AlreadyExistsError):
        store.create(EDGE_FUNCTION, make_function(), options=DEFAULT_CALL_OPTIONS)


def test_same_key_in_different_kinds_does_not_collide() -> None:
    store = InMemoryRemoteStore()
    store.create(EDGE_FUNCTION, make_function(name="batch"), options=DEFAULT_CALL_OPTIONS)

    store.create(CLUSTER_PROFILE, make_profile(), options=DEFAULT_CALL_OPTIONS)


def test_read_stage_keeps_content_out_of_metadata_for_content_kinds() -> None:
    store = InMemoryRemoteStore()
    store.create(EDGE_FUNCTION, make_function(), options=DEFAULT_CALL_OPTIONS)

    record = store.read_stage(EDGE_FUNCTION, IDENTITY, Stage.DRAFT, options=DEFAULT_CALL_OPTIONS)
    content = store.read_content(EDGE_FUNCTION, IDENTITY, Stage.DRAFT, options=DEFAULT_CALL_OPTIONS)

    assert record.fields.content is None
    assert record.fields.comment == "append index.html"
    assert content == make_function().content


def test_update_rotates_draft_token() -> None:
    store = InMemoryRemoteStore()
    created = store.create(EDGE_FUNCTION, make_function(), options=DEFAULT_CALL_OPTIONS)

    token = store.update(
        EDGE_FUNCTION,
        IDENTITY,
        make_function(comment="changed"),
        created.token,
        options=DEFAULT_CALL_OPTIONS,
    )

    assert token != created.token
    with pytest.raises(ConflictError):
        store.update(
            EDGE_FUNCTION, IDENTITY, make_function(), created.token, options=DEFAULT_CALL_OPTIONS
        )


def test_publish_copies_draft_and_its_token() -> None:
    store = InMemoryRemoteStore()
    created = store.create(EDGE_FUNCTION, make_function(), options=DEFAULT_CALL_OPTIONS)

    published = store.publish(EDGE_FUNCTION, IDENTITY, created.token, options=DEFAULT_CALL_OPTIONS)
    record = store.read_stage(
        EDGE_FUNCTION, IDENTITY, Stage.PUBLISHED, options=DEFAULT_CALL_OPTIONS
    )

    assert published.value == created.token.value
    assert published.stage is Stage.PUBLISHED
    assert record.status == "UNASSOCIATED"


def test_publish_is_rejected_for_unpublishable_kind() -> None:
    store = InMemoryRemoteStore()
    created = store.create(CLUSTER_PROFILE, make_profile(), options=DEFAULT_CALL_OPTIONS)

    with pytest.raises(ValidationFailedError):
        store.publish(
            CLUSTER_PROFILE, created.identity, created.token, options=DEFAULT_CALL_OPTIONS
        )


def test_missing_published_stage_is_not_found() -> None:
    store = InMemoryRemoteStore()
    store.create(EDGE_FUNCTION, make_function(publish=False), options=DEFAULT_CALL_OPTIONS)

    with pytest.raises(NotFoundError):
        store.read_stage(EDGE_FUNCTION, IDENTITY, Stage.PUBLISHED, options=DEFAULT_CALL_OPTIONS)


def test_delete_requires_current_token_then_forgets_object() -> None:
    store = InMemoryRemoteStore()
    created = store.create(EDGE_FUNCTION, make_function(), options=DEFAULT_CALL_OPTIONS)

    store.delete(EDGE_FUNCTION, IDENTITY, created.token, options=DEFAULT_CALL_OPTIONS)

    with pytest.raises(NotFoundError):
        store.delete(EDGE_FUNCTION, IDENTITY, created.token, options=DEFAULT_CALL_OPTIONS)
    assert [call.method for call in store.mutation_calls] == ["create", "delete", "delete"]
