"""Cross-cutting helpers shared by every layer."""

from __future__ import annotations

from .logging import configure_logging

__all__ = ["configure_logging"]
