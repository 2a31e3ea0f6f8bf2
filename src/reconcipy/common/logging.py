"""Shared logging helpers for reconcipy."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

# httpx logs every request at INFO; the reconciler already logs each remote mutation.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure_logging(
    *,
    level: int | str = logging.INFO,
    force: bool = False,
    quiet: Iterable[str] = _NOISY_LOGGERS,
) -> None:
    """Initialise the root logger once with a terse CLI-friendly format.

    ``level`` accepts either a numeric level or a level name (``"DEBUG"``). Loggers
    listed in ``quiet`` are capped at WARNING unless the root level is DEBUG.
    Pass ``force=True`` to reconfigure during tests or specialised entry points.
    """

    resolved = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        level=resolved,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )
    if resolved > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)
