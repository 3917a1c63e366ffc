"""Counter synchronization engine.

Keeps ``Category.vendor_count``, ``SubCategory.vendor_count`` and
``Bundle.subscribers_count`` equal to the number of *approved* vendors that
reference them. The vendor repository hands every mutation (create, save,
update-by-filter, delete, delete-by-filter) to :meth:`CounterSyncEngine.apply`
with the state before and after the write.

Counter writes are side effects of the vendor write. A failing counter write
is rolled back to its savepoint and logged; the vendor write still goes
through. Drift left behind that way is repaired by :func:`recalculate_counts`.

Known weak point: the previous state is whatever the session loaded. Two
requests mutating the same vendor concurrently can both diff against the same
previous state. Loading with ``FOR UPDATE`` (see the vendor repository)
closes that on databases that honour row locks; SQLite does not.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.vendor import APPROVED, EXPIRED, PENDING, REJECTED, Vendor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VendorSnapshot:
    """The counter-relevant part of one vendor's state."""

    status: str
    category_ids: frozenset[str] = frozenset()
    subcategory_ids: frozenset[str] = frozenset()
    bundle_id: str | None = None

    @property
    def is_approved(self) -> bool:
        return self.status == APPROVED


@dataclass
class CounterChanges:
    categories: dict[str, int] = field(default_factory=dict)
    subcategories: dict[str, int] = field(default_factory=dict)
    bundles: dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.categories or self.subcategories or self.bundles)

    def add_membership(self, snapshot: VendorSnapshot, delta: int) -> None:
        for cat_id in snapshot.category_ids:
            _bump(self.categories, cat_id, delta)
        for sub_id in snapshot.subcategory_ids:
            _bump(self.subcategories, sub_id, delta)
        if snapshot.bundle_id:
            _bump(self.bundles, snapshot.bundle_id, delta)


def _bump(target: dict[str, int], key: str, delta: int) -> None:
    value = target.get(key, 0) + delta
    if value:
        target[key] = value
    else:
        target.pop(key, None)


def plan_counter_changes(
    previous: VendorSnapshot | None, current: VendorSnapshot | None
) -> CounterChanges:
    """Return the counter deltas for one vendor mutation.

    ``previous`` is ``None`` for a brand-new vendor, ``current`` is ``None``
    for a deletion. Cases are checked in order; the first match wins.
    """
    changes = CounterChanges()
    was_approved = previous is not None and previous.is_approved
    is_approved = current is not None and current.is_approved

    # 1. newly approved: count the new membership
    if not was_approved and is_approved:
        changes.add_membership(current, +1)

    # 2./3. lost approval, expired, or deleted: uncount what was counted
    elif was_approved and (current is None or current.status in (PENDING, REJECTED, EXPIRED)):
        changes.add_membership(previous, -1)

    # 4. still approved: move only what changed
    elif was_approved and is_approved:
        for cat_id in current.category_ids - previous.category_ids:
            _bump(changes.categories, cat_id, +1)
        for cat_id in previous.category_ids - current.category_ids:
            _bump(changes.categories, cat_id, -1)
        for sub_id in current.subcategory_ids - previous.subcategory_ids:
            _bump(changes.subcategories, sub_id, +1)
        for sub_id in previous.subcategory_ids - current.subcategory_ids:
            _bump(changes.subcategories, sub_id, -1)
        if previous.bundle_id != current.bundle_id:
            if previous.bundle_id:
                _bump(changes.bundles, previous.bundle_id, -1)
            if current.bundle_id:
                _bump(changes.bundles, current.bundle_id, +1)

    # 5. never approved: nothing was counted
    return changes


class CounterStore(Protocol):
    async def increment_counts(self, deltas: Mapping[str, int]) -> None: ...


class CounterSyncEngine:
    """Applies :func:`plan_counter_changes` results to the three counter stores."""

    def __init__(
        self,
        session: AsyncSession,
        categories: CounterStore,
        subcategories: CounterStore,
        bundles: CounterStore,
    ):
        self._session = session
        self._stores = (
            ("category", categories),
            ("subcategory", subcategories),
            ("bundle", bundles),
        )

    async def apply(
        self, previous: VendorSnapshot | None, current: VendorSnapshot | None
    ) -> CounterChanges:
        changes = plan_counter_changes(previous, current)
        if changes.is_empty:
            return changes

        logger.debug(
            "Counter sync: categories=%s subcategories=%s bundles=%s",
            changes.categories, changes.subcategories, changes.bundles,
        )
        deltas_by_store = {
            "category": changes.categories,
            "subcategory": changes.subcategories,
            "bundle": changes.bundles,
        }
        for name, store in self._stores:
            deltas = deltas_by_store[name]
            if not deltas:
                continue
            # One savepoint per collection: a failure rolls back only that
            # collection's increments.
            try:
                async with self._session.begin_nested():
                    await store.increment_counts(deltas)
            except Exception:
                logger.exception("Counter sync failed for %s counters %s", name, deltas)
        return changes


async def recalculate_counts(
    session: AsyncSession,
    categories,
    subcategories,
    bundles,
) -> dict[str, int]:
    """Recount every counter from the approved vendors, from scratch."""
    result = await session.execute(select(Vendor).where(Vendor.vendor_status == APPROVED))
    approved = list(result.scalars().all())

    category_counts: Counter[str] = Counter()
    subcategory_counts: Counter[str] = Counter()
    bundle_counts: Counter[str] = Counter()
    for vendor in approved:
        category_counts.update(set(vendor.main_category_ids))
        subcategory_counts.update(set(vendor.sub_category_ids))
        if vendor.selected_bundle_id:
            bundle_counts[vendor.selected_bundle_id] += 1

    summary = {
        "total_approved_vendors": len(approved),
        "categories_updated": await categories.set_counts(category_counts),
        "subcategories_updated": await subcategories.set_counts(subcategory_counts),
        "bundles_updated": await bundles.set_counts(bundle_counts),
    }
    logger.info("Recalculated vendor counters: %s", summary)
    return summary
