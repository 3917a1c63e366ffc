"""CatalogService: slugs, uniqueness and bundle capacity rules."""

import pytest
from sqlalchemy.exc import InvalidRequestError

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.domain.vendor import APPROVED
from app.schemas.catalog import BundleCreate, BundleUpdate, CategoryCreate, SubCategoryCreate
from app.services.catalog import CatalogService
from app.services.vendor import VendorService


@pytest.fixture
def catalog_service(session):
    return CatalogService(session)


async def test_category_slug_and_uniqueness(catalog_service, catalog):
    category = await catalog_service.create_category(CategoryCreate(name="Wedding-Planners"))
    assert category.slug == "wedding-planners-1"
    assert category.vendor_count == 0

    with pytest.raises(ConflictError):
        await catalog_service.create_category(CategoryCreate(name="Caterers"))


async def test_subcategory_requires_existing_category(catalog_service, catalog):
    sub = await catalog_service.create_subcategory(
        SubCategoryCreate(name="Beach Weddings", main_category_id=catalog["A"].id, is_new=True)
    )
    assert sub.slug == "beach-weddings"

    with pytest.raises(NotFoundError):
        await catalog_service.create_subcategory(
            SubCategoryCreate(name="Orphan", main_category_id="missing")
        )


async def test_create_bundle_flattens_duration_and_bonus(catalog_service):
    bundle = await catalog_service.create_bundle(
        BundleCreate(
            name="Platinum",
            duration={"value": 6, "unit": "months"},
            bonus_period={"value": 1, "unit": "months", "description": "Launch offer"},
            price=1500,
            features=["Listing"],
            max_vendors=10,
        )
    )
    assert (bundle.duration_value, bundle.duration_unit) == (6, "months")
    assert (bundle.bonus_value, bundle.bonus_unit) == (1, "months")
    assert bundle.subscribers_count == 0
    assert bundle.available_slots == 10
    assert not bundle.has_reached_capacity


async def test_max_vendors_cannot_drop_below_subscribers(
    session, catalog_service, catalog, vendor_payload
):
    vendors = VendorService(session)
    for _ in range(2):
        await vendors.create_vendor(
            vendor_payload(selected_bundle=catalog["monthly"].id), status=APPROVED
        )

    with pytest.raises(ValidationError, match="Current subscribers: 2"):
        await catalog_service.update_bundle(catalog["monthly"].id, BundleUpdate(max_vendors=1))

    bundle = await catalog_service.update_bundle(
        catalog["monthly"].id, BundleUpdate(max_vendors=2, price=120)
    )
    assert bundle.has_reached_capacity
    assert bundle.available_slots == 0
    assert bundle.price == 120


async def test_bundle_in_use_cannot_be_deleted(session, catalog_service, catalog, vendor_payload):
    await VendorService(session).create_vendor(vendor_payload())

    with pytest.raises(ConflictError, match="1 vendor"):
        await catalog_service.delete_bundle(catalog["yearly"].id)

    await catalog_service.delete_bundle(catalog["monthly"].id)
    with pytest.raises(NotFoundError):
        await catalog_service.get_bundle(catalog["monthly"].id)


async def test_toggle_bundle_status(catalog_service, catalog):
    bundle = await catalog_service.toggle_bundle_status(catalog["yearly"].id)
    assert bundle.status == "inactive"
    bundle = await catalog_service.toggle_bundle_status(catalog["yearly"].id)
    assert bundle.status == "active"


async def test_category_relationships_are_never_lazy_loaded(catalog_service, catalog):
    sub = await catalog_service.create_subcategory(
        SubCategoryCreate(name="Garden Weddings", main_category_id=catalog["A"].id)
    )
    with pytest.raises(InvalidRequestError):
        sub.main_category
    with pytest.raises(InvalidRequestError):
        catalog["A"].subcategories
