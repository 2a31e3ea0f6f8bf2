"""Reconciliation core for a single remote resource identity.

Layered flow for one operation:
1) validate the descriptor against its resource kind (no remote call)
2) plan: compare the descriptor with the last-observed draft snapshot
3) issue only the mutations the plan requires (update, then publish)
4) resolve a fresh view across all declared stages
"""

from __future__ import annotations

from .plan import (
    COMPARED_FIELDS,
    PlanAction,
    ReconcilePlan,
    RepublishPolicy,
    changed_fields,
    plan_changes,
    published_is_current,
)
from .reconciler import Reconciler
from .stage_view import StageView
from .state import ResourceState

__all__ = [
    "COMPARED_FIELDS",
    "PlanAction",
    "ReconcilePlan",
    "Reconciler",
    "RepublishPolicy",
    "ResourceState",
    "StageView",
    "changed_fields",
    "plan_changes",
    "published_is_current",
]
