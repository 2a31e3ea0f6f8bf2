from __future__ import annotations

import pytest

from reconcipy.domain.errors import ValidationFailedError
from reconcipy.domain.model import Identity


def test_single_part_identity() -> None:
    identity = Identity.parse("rewrite-index")

    assert identity.key == "rewrite-index"
    assert identity.name == "rewrite-index"
    assert identity.scope == ()
    assert str(identity) == "rewrite-index"


def test_composite_identity_round_trips_through_its_key() -> None:
    identity = Identity.of("analytics", "batch")

    assert identity.key == "analytics:batch"
    assert identity.scope == ("analytics",)
    assert identity.name == "batch"
    assert Identity.parse(identity.key, arity=2) == identity


@pytest.mark.parametrize(
    ("raw", "arity"),
    [
        ("analytics", 2),
        ("analytics:batch:extra", 2),
        ("analytics:batch", 1),
        (":batch", 2),
        ("analytics:", 2),
    ],
)
def test_parse_rejects_malformed_keys(raw: str, arity: int) -> None:
    with pytest.raises(ValidationFailedError):
        Identity.parse(raw, arity=arity)


def test_parts_must_not_contain_the_delimiter() -> None:
    with pytest.raises(ValidationFailedError):
        Identity.of("a:b")


def test_identity_requires_parts() -> None:
    with pytest.raises(ValidationFailedError):
        Identity(())
