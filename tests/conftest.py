from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from reconcipy.adapters.memory import InMemoryRemoteStore
from reconcipy.domain.model import CLUSTER_PROFILE, EDGE_FUNCTION
from reconcipy.domain.reconciliation import Reconciler
from tests.support.stores import FlakyStore

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def store() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def reconciler(store: FlakyStore) -> Reconciler:
    return Reconciler(store=store, kind=EDGE_FUNCTION)


@pytest.fixture
def profile_store() -> InMemoryRemoteStore:
    return InMemoryRemoteStore(create_status="CREATING")


@pytest.fixture
def profile_reconciler(profile_store: InMemoryRemoteStore) -> Reconciler:
    return Reconciler(store=profile_store, kind=CLUSTER_PROFILE)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[pytest.MonkeyPatch]:
    for name in (
        "RECONCIPY_BASE_URL",
        "RECONCIPY_API_TOKEN",
        "RECONCIPY_TIMEOUT_SECONDS",
        "RECONCIPY_MAX_CALLS_PER_SECOND",
        "RECONCIPY_REPUBLISH",
    ):
        monkeypatch.delenv(name, raising=False)
    yield monkeypatch
