"""Transition policy of the counter sync engine (no database)."""

from app.domain.vendor import APPROVED, EXPIRED, PENDING, REJECTED
from app.services.counter_sync import VendorSnapshot, plan_counter_changes


def snap(status, cats=(), subs=(), bundle="Z"):
    return VendorSnapshot(status, frozenset(cats), frozenset(subs), bundle)


def test_new_vendor_created_approved_counts_everything():
    changes = plan_counter_changes(None, snap(APPROVED, ["A", "B"], ["S"]))
    assert changes.categories == {"A": 1, "B": 1}
    assert changes.subcategories == {"S": 1}
    assert changes.bundles == {"Z": 1}


def test_new_pending_vendor_counts_nothing():
    assert plan_counter_changes(None, snap(PENDING, ["A"])).is_empty


def test_approval_uses_next_membership():
    changes = plan_counter_changes(snap(PENDING, ["A"]), snap(APPROVED, ["B"], bundle="Y"))
    assert changes.categories == {"B": 1}
    assert changes.bundles == {"Y": 1}


def test_losing_approval_uses_previous_membership():
    for status in (PENDING, REJECTED, EXPIRED):
        changes = plan_counter_changes(
            snap(APPROVED, ["A"], ["S"], bundle="Z"), snap(status, ["B"], [], bundle="Y")
        )
        assert changes.categories == {"A": -1}
        assert changes.subcategories == {"S": -1}
        assert changes.bundles == {"Z": -1}


def test_deleting_approved_vendor_decrements_previous_membership():
    changes = plan_counter_changes(snap(APPROVED, ["A", "B"]), None)
    assert changes.categories == {"A": -1, "B": -1}
    assert changes.bundles == {"Z": -1}


def test_deleting_non_approved_vendor_is_noop():
    for status in (PENDING, REJECTED, EXPIRED):
        assert plan_counter_changes(snap(status, ["A"]), None).is_empty


def test_remaining_approved_moves_only_the_difference():
    changes = plan_counter_changes(
        snap(APPROVED, ["A", "B"], ["S1"]), snap(APPROVED, ["B", "C"], ["S2"])
    )
    assert changes.categories == {"A": -1, "C": 1}
    assert changes.subcategories == {"S1": -1, "S2": 1}
    assert changes.bundles == {}


def test_remaining_approved_bundle_swap():
    changes = plan_counter_changes(snap(APPROVED, ["A"], bundle="Z"), snap(APPROVED, ["A"], bundle="Y"))
    assert changes.categories == {}
    assert changes.bundles == {"Z": -1, "Y": 1}


def test_remaining_approved_bundle_absent_on_one_side():
    added = plan_counter_changes(snap(APPROVED, bundle=None), snap(APPROVED, bundle="Y"))
    removed = plan_counter_changes(snap(APPROVED, bundle="Z"), snap(APPROVED, bundle=None))
    assert added.bundles == {"Y": 1}
    assert removed.bundles == {"Z": -1}


def test_unchanged_approved_vendor_is_noop():
    assert plan_counter_changes(snap(APPROVED, ["A"], ["S"]), snap(APPROVED, ["A"], ["S"])).is_empty


def test_remaining_non_approved_is_noop():
    assert plan_counter_changes(snap(PENDING, ["A"]), snap(REJECTED, ["B"], bundle="Y")).is_empty
