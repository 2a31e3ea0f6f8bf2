"""Public domain model surface."""

from __future__ import annotations

from reconcipy.domain.model.associations import (
    DEFAULT_KEY_FIELD,
    AssociationDiff,
    AssociationRef,
    AssociationSet,
    diff,
    equal,
    expand,
    flatten,
    normalize,
)
from reconcipy.domain.model.descriptor import Descriptor, ObservedFields
from reconcipy.domain.model.enums import Lifecycle, Stage
from reconcipy.domain.model.identity import KEY_DELIMITER, Identity
from reconcipy.domain.model.kinds import (
    CLUSTER_PROFILE,
    EDGE_FUNCTION,
    KINDS,
    ResourceKind,
    StageRule,
    get_kind,
)
from reconcipy.domain.model.snapshots import ReconciledView, StageSnapshot
from reconcipy.domain.model.tokens import ConcurrencyToken

__all__ = [  # noqa: RUF022
    # associations
    "DEFAULT_KEY_FIELD",
    "AssociationDiff",
    "AssociationRef",
    "AssociationSet",
    "diff",
    "equal",
    "expand",
    "flatten",
    "normalize",
    # descriptors
    "Descriptor",
    "ObservedFields",
    # enums
    "Lifecycle",
    "Stage",
    # identity
    "KEY_DELIMITER",
    "Identity",
    # kinds
    "CLUSTER_PROFILE",
    "EDGE_FUNCTION",
    "KINDS",
    "ResourceKind",
    "StageRule",
    "get_kind",
    # snapshots
    "ConcurrencyToken",
    "ReconciledView",
    "StageSnapshot",
]
