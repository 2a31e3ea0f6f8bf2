"""HTTP/JSON remote store adapter."""

from __future__ import annotations

from .client import HttpRemoteStore

__all__ = ["HttpRemoteStore"]
