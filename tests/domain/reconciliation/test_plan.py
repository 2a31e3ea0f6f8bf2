from __future__ import annotations

from reconcipy.domain.model import (
    CLUSTER_PROFILE,
    EDGE_FUNCTION,
    AssociationSet,
    ConcurrencyToken,
    Identity,
    ObservedFields,
    ReconciledView,
    Stage,
    StageSnapshot,
)
from reconcipy.domain.reconciliation import (
    COMPARED_FIELDS,
    PlanAction,
    RepublishPolicy,
    ResourceState,
    changed_fields,
    plan_changes,
    published_is_current,
)
from tests.support.stores import make_function, make_profile


def _state(
    *,
    draft: ObservedFields,
    published: ObservedFields | None = None,
    identity: Identity | None = None,
) -> ResourceState:
    snapshots = {
        Stage.DRAFT: StageSnapshot(
            stage=Stage.DRAFT,
            token=ConcurrencyToken("D1", Stage.DRAFT),
            status="UNASSOCIATED",
            fields=draft,
        )
    }
    if published is not None:
        snapshots[Stage.PUBLISHED] = StageSnapshot(
            stage=Stage.PUBLISHED,
            token=ConcurrencyToken("D1", Stage.PUBLISHED),
            status="UNASSOCIATED",
            fields=published,
        )
    return ResourceState(ReconciledView(identity or Identity.of("rewrite-index"), snapshots))


def test_absent_state_plans_create() -> None:
    descriptor = make_function(associations=AssociationSet.of("kvs-1"))

    plan = plan_changes(EDGE_FUNCTION, ResourceState.absent(), descriptor)

    assert plan.action is PlanAction.CREATE
    assert plan.changed == COMPARED_FIELDS
    assert plan.associations.added == frozenset({"kvs-1"})
    assert plan.publish
    assert plan.remote_mutations == 2


def test_identical_published_descriptor_is_noop() -> None:
    descriptor = make_function()
    observed = descriptor.observed()

    plan = plan_changes(EDGE_FUNCTION, _state(draft=observed, published=observed), descriptor)

    assert plan.action is PlanAction.NOOP
    assert plan.remote_mutations == 0


def test_unchanged_draft_with_stale_live_stage_plans_publish_only() -> None:
    descriptor = make_function()
    stale = make_function(content="old").observed()

    plan = plan_changes(
        EDGE_FUNCTION, _state(draft=descriptor.observed(), published=stale), descriptor
    )

    assert plan.action is PlanAction.PUBLISH
    assert plan.changed == ()
    assert plan.remote_mutations == 1


def test_unpublished_draft_plans_publish_when_requested() -> None:
    descriptor = make_function()

    plan = plan_changes(EDGE_FUNCTION, _state(draft=descriptor.observed()), descriptor)

    assert plan.action is PlanAction.PUBLISH


def test_always_policy_republishes_unchanged_descriptor() -> None:
    descriptor = make_function()
    observed = descriptor.observed()

    plan = plan_changes(
        EDGE_FUNCTION,
        _state(draft=observed, published=observed),
        descriptor,
        policy=RepublishPolicy.ALWAYS,
    )

    assert plan.action is PlanAction.PUBLISH
    assert plan.publish


def test_changed_content_plans_update_and_publish() -> None:
    observed = make_function(content="old").observed()

    plan = plan_changes(EDGE_FUNCTION, _state(draft=observed, published=observed), make_function())

    assert plan.action is PlanAction.UPDATE
    assert plan.changed == ("content",)
    assert plan.publish


def test_publish_false_never_plans_publish() -> None:
    descriptor = make_function(publish=False)

    plan = plan_changes(EDGE_FUNCTION, _state(draft=descriptor.observed()), descriptor)

    assert plan.action is PlanAction.NOOP
    assert not plan.publish


def test_missing_comment_matches_empty_comment() -> None:
    observed = make_function(comment=None).observed()

    assert changed_fields(observed, make_function(comment="")) == ()


def test_reordered_associations_are_not_a_change() -> None:
    observed = make_function(associations=AssociationSet.of("a", "b")).observed()
    descriptor = make_function(associations=AssociationSet.of("b", "a"))

    assert changed_fields(observed, descriptor) == ()


def test_association_change_is_reported_with_diff() -> None:
    observed = make_profile(subnets=("subnet-a",)).observed()
    descriptor = make_profile(subnets=("subnet-a", "subnet-c"))
    state = _state(draft=observed, identity=descriptor.identity)

    plan = plan_changes(CLUSTER_PROFILE, state, descriptor)

    assert plan.action is PlanAction.UPDATE
    assert plan.changed == ("associations",)
    assert plan.associations.added == frozenset({"subnet-c"})
    assert not plan.publish


def test_published_is_current_compares_stage_fields() -> None:
    observed = make_function().observed()
    live = _state(draft=observed, published=observed).view
    draft_only = _state(draft=observed).view
    assert live is not None
    assert draft_only is not None

    assert published_is_current(live)
    assert not published_is_current(draft_only)
