"""Optimistic-concurrency tokens."""

from __future__ import annotations

from dataclasses import dataclass

from reconcipy.domain.errors import ValidationFailedError

from .enums import Stage


@dataclass(frozen=True, slots=True)
class ConcurrencyToken:
    """Opaque version marker issued by the remote store for one stage.

    The value is never parsed locally; two tokens are only ever compared for
    equality when building a request.
    """

    value: str
    stage: Stage

    def __post_init__(self) -> None:
        if not self.value:
            raise ValidationFailedError(f"Empty concurrency token for stage {self.stage}")

    def require_stage(self, stage: Stage) -> None:
        if self.stage is not stage:
            raise ValidationFailedError(
                f"Token issued by the {self.stage} stage cannot mutate the {stage} stage"
            )

    def __str__(self) -> str:
        return self.value
