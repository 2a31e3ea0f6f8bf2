"""Natural keys for remote resources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from reconcipy.domain.errors import ValidationFailedError

KEY_DELIMITER: Final[str] = ":"


@dataclass(frozen=True, slots=True)
class Identity:
    """Immutable natural key; one part, or parent parts followed by the name."""

    parts: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.parts:
            raise ValidationFailedError("Identity requires at least one key part")
        for part in self.parts:
            if not part or not part.strip():
                raise ValidationFailedError(f"Blank key part in identity {self.parts!r}")
            if KEY_DELIMITER in part:
                raise ValidationFailedError(
                    f"Key part {part!r} must not contain {KEY_DELIMITER!r}"
                )

    @classmethod
    def of(cls, *parts: str) -> Identity:
        return cls(tuple(parts))

    @classmethod
    def parse(cls, raw: str, *, arity: int = 1) -> Identity:
        """Parse ``name`` or ``parent:name`` import strings.

        ``arity`` is the number of parts the resource kind expects.
        """

        parts = tuple(raw.strip().split(KEY_DELIMITER))
        if len(parts) != arity:
            expected = KEY_DELIMITER.join(f"part{index + 1}" for index in range(arity))
            raise ValidationFailedError(
                f"Unexpected format for key {raw!r}, expected {expected}"
            )
        return cls(parts)

    @property
    def key(self) -> str:
        return KEY_DELIMITER.join(self.parts)

    @property
    def name(self) -> str:
        return self.parts[-1]

    @property
    def scope(self) -> tuple[str, ...]:
        return self.parts[:-1]

    def __str__(self) -> str:
        return self.key
