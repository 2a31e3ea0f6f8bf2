"""Set-valued nested references (e.g. key-value store or subnet attachments).

Matching policy is key-only: two sets are equal when they hold the same reference
keys, regardless of order. ``None`` and the empty set are the same value everywhere
they are compared or flattened for transmission.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Final, TypeAlias

from reconcipy.domain.errors import DuplicateReferenceError, ValidationFailedError

DEFAULT_KEY_FIELD: Final[str] = "reference_key"

RawAssociation: TypeAlias = Mapping[str, object]


@dataclass(frozen=True, slots=True, order=True)
class AssociationRef:
    key: str

    def __post_init__(self) -> None:
        if not self.key or not self.key.strip():
            raise ValidationFailedError("Association reference key must not be blank")


@dataclass(frozen=True, slots=True)
class AssociationDiff:
    """Keys to attach and detach to move from one set to another."""

    added: frozenset[str] = frozenset()
    removed: frozenset[str] = frozenset()

    def __bool__(self) -> bool:
        return bool(self.added or self.removed)


class AssociationSet:
    """Immutable set of association references with unique keys."""

    __slots__ = ("_refs",)

    def __init__(self, refs: Iterable[AssociationRef] = ()) -> None:
        seen: set[str] = set()
        for ref in refs:
            if ref.key in seen:
                raise DuplicateReferenceError(ref.key)
            seen.add(ref.key)
        self._refs = frozenset(AssociationRef(key) for key in seen)

    @classmethod
    def of(cls, *keys: str) -> AssociationSet:
        return cls(AssociationRef(key) for key in keys)

    @property
    def keys(self) -> frozenset[str]:
        return frozenset(ref.key for ref in self._refs)

    def __iter__(self) -> Iterator[AssociationRef]:
        return iter(self._refs)

    def __len__(self) -> int:
        return len(self._refs)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return AssociationRef(item) in self._refs if item.strip() else False
        return item in self._refs

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AssociationSet):
            return NotImplemented
        return self._refs == other._refs

    def __hash__(self) -> int:
        return hash(self._refs)

    def __repr__(self) -> str:
        return f"AssociationSet({sorted(self.keys)!r})"


def normalize(associations: AssociationSet | None) -> AssociationSet:
    return associations if associations is not None else AssociationSet()


def expand(
    raw_items: Iterable[RawAssociation] | None,
    *,
    key_field: str = DEFAULT_KEY_FIELD,
) -> AssociationSet:
    """Build a validated set from raw records, rejecting duplicate keys."""

    if raw_items is None:
        return AssociationSet()

    refs: list[AssociationRef] = []
    for item in raw_items:
        value = item.get(key_field)
        if not isinstance(value, str):
            raise ValidationFailedError(f"Association record is missing {key_field!r}: {item!r}")
        refs.append(AssociationRef(value))
    return AssociationSet(refs)


def flatten(
    associations: AssociationSet | None,
    *,
    key_field: str = DEFAULT_KEY_FIELD,
) -> list[dict[str, str]]:
    """Raw records for transmission. Order is unspecified."""

    return [{key_field: ref.key} for ref in normalize(associations)]


def equal(left: AssociationSet | None, right: AssociationSet | None) -> bool:
    return normalize(left).keys == normalize(right).keys


def diff(current: AssociationSet | None, desired: AssociationSet | None) -> AssociationDiff:
    current_keys = normalize(current).keys
    desired_keys = normalize(desired).keys
    return AssociationDiff(
        added=desired_keys - current_keys,
        removed=current_keys - desired_keys,
    )
