"""Domain port definitions for adapters."""

from __future__ import annotations

from .remote_store import (
    DEFAULT_CALL_OPTIONS,
    CallOptions,
    CreateResult,
    RemoteStore,
    StageRecord,
)

__all__ = [
    "DEFAULT_CALL_OPTIONS",
    "CallOptions",
    "CreateResult",
    "RemoteStore",
    "StageRecord",
]
