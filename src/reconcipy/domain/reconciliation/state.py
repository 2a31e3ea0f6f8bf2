"""Caller-held record of the last remotely confirmed state of one identity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from reconcipy.domain.errors import LifecycleError
from reconcipy.domain.model import Lifecycle

if TYPE_CHECKING:
    from reconcipy.domain.model import ConcurrencyToken, Identity, ReconciledView


@dataclass(frozen=True, slots=True)
class ResourceState:
    """Immutable; every reconciler operation returns a new value on success."""

    view: ReconciledView | None = None

    @classmethod
    def absent(cls) -> ResourceState:
        return cls()

    @property
    def lifecycle(self) -> Lifecycle:
        return self.view.lifecycle if self.view is not None else Lifecycle.ABSENT

    @property
    def identity(self) -> Identity | None:
        return self.view.identity if self.view is not None else None

    @property
    def draft_token(self) -> ConcurrencyToken | None:
        return self.view.draft.token if self.view is not None else None

    @property
    def published_token(self) -> ConcurrencyToken | None:
        if self.view is None or self.view.published is None:
            return None
        return self.view.published.token

    def require_view(self, operation: str) -> ReconciledView:
        if self.view is None:
            raise LifecycleError(f"Cannot {operation} a resource that is {Lifecycle.ABSENT}")
        return self.view
