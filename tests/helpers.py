"""Assertion helpers for counter state."""

from sqlalchemy import select

from app.domain.catalog import Bundle, Category, SubCategory
from app.domain.vendor import APPROVED, Vendor

DESCRIPTION = (
    "We plan and run weddings, corporate events and private parties across the UAE "
    "with a full in-house team."
)


async def vendor_count(session, model, entity_id) -> int:
    return (
        await session.execute(select(model.vendor_count).where(model.id == entity_id))
    ).scalar_one()


async def subscribers(session, bundle_id) -> int:
    return (
        await session.execute(select(Bundle.subscribers_count).where(Bundle.id == bundle_id))
    ).scalar_one()


async def assert_counters_consistent(session) -> None:
    """Every counter equals the number of approved vendors referencing it."""
    vendors = (
        await session.execute(select(Vendor).where(Vendor.vendor_status == APPROVED))
    ).scalars().all()

    for model, ids_of in (
        (Category, lambda v: v.main_category_ids),
        (SubCategory, lambda v: v.sub_category_ids),
    ):
        rows = (await session.execute(select(model.id, model.vendor_count))).all()
        for entity_id, count in rows:
            expected = sum(1 for v in vendors if entity_id in ids_of(v))
            assert count == expected, f"{model.__name__} {entity_id}: {count} != {expected}"

    rows = (await session.execute(select(Bundle.id, Bundle.subscribers_count))).all()
    for bundle_id, count in rows:
        expected = sum(1 for v in vendors if v.selected_bundle_id == bundle_id)
        assert count == expected, f"Bundle {bundle_id}: {count} != {expected}"
