"""Vendor repository.

Every write path funnels through :meth:`VendorRepository.save` or
:meth:`VendorRepository.delete`, so the counter sync engine sees the state
before and after each mutation. There is no bulk
``UPDATE vendors`` / ``DELETE FROM vendors``: the filter-based variants load
the matching rows first and mutate them one by one.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import inspect, or_, select
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import ConflictError
from app.domain.vendor import Vendor
from app.repositories.base import BaseRepository
from app.services.counter_sync import CounterSyncEngine, VendorSnapshot


def _committed_scalar(state, key: str):
    hist = state.attrs[key].history
    if hist.deleted:
        return hist.deleted[0]
    if hist.unchanged:
        return hist.unchanged[0]
    return None


def _committed_collection(state, key: str) -> list:
    hist = state.attrs[key].history
    return list(hist.unchanged or ()) + list(hist.deleted or ())


def persisted_snapshot(vendor: Vendor) -> VendorSnapshot | None:
    """State as last loaded from / written to the database; None if never persisted."""
    state = inspect(vendor)
    if state.transient or state.pending:
        return None
    return VendorSnapshot(
        status=_committed_scalar(state, "vendor_status"),
        category_ids=frozenset(c.id for c in _committed_collection(state, "main_categories")),
        subcategory_ids=frozenset(s.id for s in _committed_collection(state, "sub_categories")),
        bundle_id=_committed_scalar(state, "selected_bundle_id"),
    )


def current_snapshot(vendor: Vendor) -> VendorSnapshot:
    return VendorSnapshot(
        status=vendor.vendor_status,
        category_ids=frozenset(vendor.main_category_ids),
        subcategory_ids=frozenset(vendor.sub_category_ids),
        bundle_id=vendor.selected_bundle_id,
    )


class VendorRepository(BaseRepository[Vendor]):
    model = Vendor

    def __init__(self, session, counter_sync: CounterSyncEngine):
        super().__init__(session)
        self._counter_sync = counter_sync

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_for_update(self, vendor_id: str) -> Vendor | None:
        result = await self._session.execute(
            self._base_query().where(Vendor.id == vendor_id).with_for_update()
        )
        return result.scalars().first()

    async def find(self, *criteria, for_update: bool = False) -> list[Vendor]:
        q = self._base_query().where(*criteria)
        if for_update:
            q = q.with_for_update()
        return list((await self._session.execute(q)).scalars().all())

    async def find_conflicts(
        self,
        *,
        email: str | None = None,
        business_name: str | None = None,
        trade_license_number: str | None = None,
        exclude_id: str | None = None,
    ) -> list[Vendor]:
        clauses = []
        if email:
            clauses.append(Vendor.email == email)
        if business_name:
            clauses.append(Vendor.business_name == business_name)
        if trade_license_number:
            clauses.append(Vendor.trade_license_number == trade_license_number)
        if not clauses:
            return []

        q = select(Vendor).where(or_(*clauses))
        if exclude_id:
            q = q.where(Vendor.id != exclude_id)
        return list((await self._session.execute(q)).scalars().all())

    async def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        criteria = [Vendor.slug == slug]
        if exclude_id:
            criteria.append(Vendor.id != exclude_id)
        return await self.exists(*criteria)

    # ------------------------------------------------------------------
    # Write (every path syncs counters)
    # ------------------------------------------------------------------

    async def save(self, vendor: Vendor) -> Vendor:
        """Insert a new vendor or flush changes to a loaded one."""
        previous = persisted_snapshot(vendor)
        self._session.add(vendor)
        await self._flush()
        await self._counter_sync.apply(previous, current_snapshot(vendor))
        return vendor

    async def update_where(self, *criteria, **values: Any) -> list[Vendor]:
        """Update-by-filter: load matching vendors, set ``values``, save each."""
        vendors = await self.find(*criteria, for_update=True)
        for vendor in vendors:
            for key, value in values.items():
                setattr(vendor, key, value)
            await self.save(vendor)
        return vendors

    async def delete(self, vendor: Vendor) -> None:
        previous = persisted_snapshot(vendor)
        await self._session.delete(vendor)
        await self._flush()
        await self._counter_sync.apply(previous, None)

    async def delete_where(self, *criteria) -> int:
        """Delete-by-filter: load matching vendors and delete each."""
        vendors = await self.find(*criteria, for_update=True)
        for vendor in vendors:
            await self.delete(vendor)
        return len(vendors)

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except IntegrityError as exc:
            await self._session.rollback()
            raise ConflictError(
                "A vendor with the same email, business name or trade license already exists"
            ) from exc
