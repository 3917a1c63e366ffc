"""Catalog service — categories, subcategories and subscription bundles.

Counters (``vendor_count``, ``subscribers_count``) are read-only here; they
are maintained by the counter sync engine.
"""


import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.pagination import PaginationParams
from app.domain.catalog import Bundle, Category, SubCategory
from app.domain.vendor import Vendor
from app.repositories.base import BaseRepository
from app.repositories.catalog import BundleRepository, CategoryRepository, SubCategoryRepository
from app.schemas.catalog import BundleCreate, BundleUpdate, CategoryCreate, SubCategoryCreate
from app.services.slug import unique_slug

logger = logging.getLogger(__name__)


class _VendorReader(BaseRepository[Vendor]):
    model = Vendor


class CatalogService:
    def __init__(self, session: AsyncSession):
        self._categories = CategoryRepository(session)
        self._subcategories = SubCategoryRepository(session)
        self._bundles = BundleRepository(session)
        self._vendors = _VendorReader(session)

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self, pagination: PaginationParams):
        return await self._categories.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
        )

    async def get_category(self, category_id: str) -> Category:
        category = await self._categories.get_by_id(category_id)
        if not category:
            raise NotFoundError("Category", category_id)
        return category

    async def create_category(self, data: CategoryCreate) -> Category:
        if await self._categories.name_taken(data.name):
            raise ConflictError(f"Category '{data.name}' already exists")
        category = Category(name=data.name, cover_image=data.cover_image, vendor_count=0)
        category.slug = await unique_slug(data.name, self._categories.slug_taken)
        return await self._categories.add(category)

    async def list_subcategories(
        self, pagination: PaginationParams, main_category_id: str | None = None
    ):
        filters = {"main_category_id": main_category_id} if main_category_id else None
        return await self._subcategories.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def create_subcategory(self, data: SubCategoryCreate) -> SubCategory:
        await self.get_category(data.main_category_id)
        if await self._subcategories.name_taken(data.name):
            raise ConflictError(f"Subcategory '{data.name}' already exists")
        sub = SubCategory(**data.model_dump(), vendor_count=0)
        sub.slug = await unique_slug(data.name, self._subcategories.slug_taken)
        return await self._subcategories.add(sub)

    # ------------------------------------------------------------------
    # Bundles
    # ------------------------------------------------------------------

    async def list_bundles(self, pagination: PaginationParams, status: str | None = None):
        filters = {"status": status} if status else None
        return await self._bundles.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def get_bundle(self, bundle_id: str) -> Bundle:
        bundle = await self._bundles.get_by_id(bundle_id)
        if not bundle:
            raise NotFoundError("Bundle", bundle_id)
        return bundle

    async def create_bundle(self, data: BundleCreate) -> Bundle:
        bonus = data.bonus_period
        bundle = Bundle(
            name=data.name,
            description=data.description,
            duration_value=data.duration.value,
            duration_unit=data.duration.unit,
            bonus_value=bonus.value if bonus else 0,
            bonus_unit=bonus.unit if bonus else "months",
            bonus_description=bonus.description if bonus else None,
            price=data.price,
            features=list(data.features),
            is_popular=data.is_popular,
            includes_recommended=data.includes_recommended,
            is_available_for_international=data.is_available_for_international,
            max_vendors=data.max_vendors,
            status=data.status,
            display_order=data.display_order,
            subscribers_count=0,
        )
        return await self._bundles.add(bundle)

    async def update_bundle(self, bundle_id: str, data: BundleUpdate) -> Bundle:
        bundle = await self.get_bundle(bundle_id)
        fields = data.model_dump(exclude_unset=True)

        duration = fields.pop("duration", None)
        if duration:
            bundle.duration_value = duration["value"]
            bundle.duration_unit = duration["unit"]
        if "bonus_period" in fields:
            bonus = fields.pop("bonus_period") or {}
            bundle.bonus_value = bonus.get("value", 0)
            bundle.bonus_unit = bonus.get("unit", "months")
            bundle.bonus_description = bonus.get("description")
        for key, value in fields.items():
            if value is None and key != "max_vendors":
                continue
            setattr(bundle, key, value)

        _check_capacity(bundle)
        await self._bundles.flush()
        return bundle

    async def toggle_bundle_status(self, bundle_id: str) -> Bundle:
        bundle = await self.get_bundle(bundle_id)
        bundle.status = "inactive" if bundle.status == "active" else "active"
        await self._bundles.flush()
        return bundle

    async def delete_bundle(self, bundle_id: str) -> None:
        bundle = await self.get_bundle(bundle_id)
        in_use = await self._vendors.count(Vendor.selected_bundle_id == bundle_id)
        if in_use:
            raise ConflictError(f"Cannot delete bundle. {in_use} vendor(s) are using it.")
        await self._bundles.delete(bundle)
        logger.info("Bundle %s deleted", bundle_id)


def _check_capacity(bundle: Bundle) -> None:
    if bundle.max_vendors is not None and bundle.subscribers_count > bundle.max_vendors:
        message = (
            f"Cannot set maxVendors to {bundle.max_vendors}. "
            f"Current subscribers: {bundle.subscribers_count}"
        )
        raise ValidationError(message, [{"field": "maxVendors", "message": message}])
