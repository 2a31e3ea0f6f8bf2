"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Stage(StrEnum):
    """Parallel lifecycle views of one remote object, in resolution order."""

    DRAFT = "draft"
    PUBLISHED = "published"


class Lifecycle(StrEnum):
    ABSENT = "absent"
    DRAFT_ONLY = "draft_only"
    DRAFT_AND_PUBLISHED = "draft_and_published"
