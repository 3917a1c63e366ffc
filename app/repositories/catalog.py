"""Category, SubCategory and Bundle repositories.

All three carry a denormalized counter and implement the counter-store
contract used by :class:`app.services.counter_sync.CounterSyncEngine`:
``increment_counts({id: delta})`` issues atomic ``count = count + delta``
updates, never read-modify-write.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Mapping

from sqlalchemy import inspect, update

from app.domain.catalog import Bundle, Category, SubCategory
from app.repositories.base import BaseRepository, ModelT


class CounterRepository(BaseRepository[ModelT]):
    counter_field: str

    @property
    def _counter(self):
        return getattr(self.model, self.counter_field)

    async def increment_counts(self, deltas: Mapping[str, int]) -> None:
        """Apply ``{entity_id: delta}``, one UPDATE per distinct delta."""
        by_delta: dict[int, list[str]] = defaultdict(list)
        for entity_id, delta in deltas.items():
            if delta:
                by_delta[delta].append(entity_id)

        for delta, ids in by_delta.items():
            await self._session.execute(
                update(self.model)
                .where(self.model.id.in_(ids))
                .values({self.counter_field: self._counter + delta})
                .execution_options(synchronize_session=False)
            )
        if by_delta:
            self._expire_counters(by_delta)

    async def set_counts(self, counts: Mapping[str, int]) -> int:
        """Overwrite counters; every id not in ``counts`` is reset to zero."""
        await self._session.execute(
            update(self.model)
            .values({self.counter_field: 0})
            .execution_options(synchronize_session=False)
        )
        for entity_id, count in counts.items():
            await self._session.execute(
                update(self.model)
                .where(self.model.id == entity_id)
                .values({self.counter_field: count})
                .execution_options(synchronize_session=False)
            )
        self._expire_all_counters()
        return len(counts)

    def _expire_counters(self, by_delta: Mapping[int, list[str]]) -> None:
        # Loaded instances hold stale counters after a bulk UPDATE.
        touched = {i for ids in by_delta.values() for i in ids}
        for obj in list(self._session.identity_map.values()):
            if isinstance(obj, self.model) and inspect(obj).identity[0] in touched:
                self._session.expire(obj, [self.counter_field])

    def _expire_all_counters(self) -> None:
        for obj in list(self._session.identity_map.values()):
            if isinstance(obj, self.model):
                self._session.expire(obj, [self.counter_field])


class CategoryRepository(CounterRepository[Category]):
    model = Category
    counter_field = "vendor_count"

    async def slug_taken(self, slug: str) -> bool:
        return await self.exists(Category.slug == slug)

    async def name_taken(self, name: str) -> bool:
        return await self.exists(Category.name == name)


class SubCategoryRepository(CounterRepository[SubCategory]):
    model = SubCategory
    counter_field = "vendor_count"

    async def slug_taken(self, slug: str) -> bool:
        return await self.exists(SubCategory.slug == slug)

    async def name_taken(self, name: str) -> bool:
        return await self.exists(SubCategory.name == name)


class BundleRepository(CounterRepository[Bundle]):
    model = Bundle
    counter_field = "subscribers_count"
