"""Vendor service — registration, profile updates and the admin approval workflow.

Counter bookkeeping is not done here: every write goes through
:class:`app.repositories.vendor.VendorRepository`, which hands the before/after
state to the counter sync engine. This service decides *when* a vendor is
approved and stamps the subscription dates when that happens.

Rule: No SQLAlchemy queries / no FastAPI here. Raise AppException subclasses
for business rule violations.
"""


import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.pagination import PaginationParams
from app.core.security import hash_password
from app.domain.catalog import Bundle, Category, SubCategory
from app.domain.vendor import APPROVED, EXPIRED, PENDING, VENDOR_STATUSES, Vendor
from app.repositories.catalog import BundleRepository, CategoryRepository, SubCategoryRepository
from app.repositories.vendor import VendorRepository
from app.schemas.vendor import CustomDurationIn, VendorCreate, VendorUpdate
from app.services.counter_sync import CounterSyncEngine, recalculate_counts
from app.services.slug import unique_slug
from app.services.subscription import ResolvedDuration, SubscriptionResolver

logger = logging.getLogger(__name__)

_RELATION_FIELDS = ("main_category", "sub_categories", "selected_bundle", "password")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _avatar_url(owner_name: str) -> str:
    return (
        f"{settings.default_avatar_url}?background=random&color=fff"
        f"&name={quote(owner_name.strip())}"
    )


class VendorService:
    def __init__(self, session: AsyncSession):
        self._categories = CategoryRepository(session)
        self._subcategories = SubCategoryRepository(session)
        self._bundles = BundleRepository(session)
        self._counter_sync = CounterSyncEngine(
            session, self._categories, self._subcategories, self._bundles
        )
        self._repo = VendorRepository(session, self._counter_sync)
        self._resolver = SubscriptionResolver(self._bundles)
        self._session = session

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_vendors(self, pagination: PaginationParams, status: str | None = None):
        filters = {"vendor_status": status} if status else None
        return await self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    async def get_vendor(self, vendor_id: str) -> Vendor:
        vendor = await self._repo.get_by_id(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    async def get_vendor_detail(
        self, vendor_id: str
    ) -> tuple[Vendor, list[str], ResolvedDuration | None]:
        vendor = await self.get_vendor(vendor_id)
        return vendor, await self.all_features(vendor), await self.resolve_duration(vendor)

    async def all_features(self, vendor: Vendor) -> list[str]:
        """Bundle features followed by the vendor's custom ones, without duplicates."""
        bundle = await self._bundles.get_by_id(vendor.selected_bundle_id)
        bundle_features = list(bundle.features or []) if bundle else []
        return list(dict.fromkeys(bundle_features + list(vendor.custom_features or [])))

    async def resolve_duration(self, vendor: Vendor) -> ResolvedDuration | None:
        return await self._resolver.resolve_duration(vendor)

    # ------------------------------------------------------------------
    # Create / update
    # ------------------------------------------------------------------

    async def create_vendor(self, data: VendorCreate, status: str = PENDING) -> Vendor:
        self._check_status(status)
        fields = data.model_dump(exclude=set(_RELATION_FIELDS))
        _blank_to_none(fields)

        await self._check_conflicts(
            email=fields["email"],
            business_name=fields["business_name"],
            trade_license_number=fields.get("trade_license_number"),
        )
        self._check_verification_fields(fields)

        vendor = Vendor(**fields)
        vendor.main_categories = await self._load_categories(data.main_category)
        vendor.sub_categories = await self._load_subcategories(data.sub_categories)
        vendor.selected_bundle_id = (await self._load_bundle(data.selected_bundle)).id
        vendor.password_hash = hash_password(data.password)
        vendor.slug = await unique_slug(vendor.business_name, self._repo.slug_taken)
        if not vendor.owner_profile_image:
            vendor.owner_profile_image = _avatar_url(vendor.owner_name)
        vendor.custom_features = []

        if status == APPROVED:
            await self._start_subscription(vendor)
        vendor.vendor_status = status

        await self._repo.save(vendor)
        logger.info("Vendor %s registered (%s)", vendor.id, vendor.vendor_status)
        return vendor

    async def update_vendor(self, vendor_id: str, data: VendorUpdate) -> Vendor:
        vendor = await self._get_for_update(vendor_id)
        fields = data.model_dump(exclude_none=True, exclude_unset=True)
        password = fields.pop("password", None)
        category_ids = fields.pop("main_category", None)
        subcategory_ids = fields.pop("sub_categories", None)
        bundle_id = fields.pop("selected_bundle", None)
        _blank_to_none(fields)

        await self._check_conflicts(
            email=_changed(vendor, fields, "email"),
            business_name=_changed(vendor, fields, "business_name"),
            trade_license_number=_changed(vendor, fields, "trade_license_number"),
            exclude_id=vendor.id,
        )
        self._check_verification_fields({**_verification_state(vendor), **fields})

        name_changed = _changed(vendor, fields, "business_name") is not None
        for key, value in fields.items():
            setattr(vendor, key, value)
        if name_changed:
            vendor.slug = await unique_slug(
                vendor.business_name,
                lambda slug: self._repo.slug_taken(slug, exclude_id=vendor.id),
            )
        if password:
            vendor.password_hash = hash_password(password)

        if category_ids is not None:
            vendor.main_categories = await self._load_categories(category_ids)
        if subcategory_ids is not None:
            vendor.sub_categories = await self._load_subcategories(subcategory_ids)
        if bundle_id is not None and bundle_id != vendor.selected_bundle_id:
            await self._load_bundle(bundle_id)
            if vendor.is_approved:
                await self._ensure_bundle_capacity(bundle_id)
            vendor.selected_bundle_id = bundle_id
            if vendor.is_approved and vendor.subscription_start_date:
                await self._refresh_end_date(vendor)

        return await self._repo.save(vendor)

    async def create_or_update_vendor(self, data: dict[str, Any]) -> Vendor:
        """In-process entry point: ``data`` with an ``id`` updates, without creates.

        An optional ``vendorStatus`` is applied through the same approval
        workflow as :meth:`update_status`.
        """
        payload = dict(data)
        vendor_id = payload.pop("id", None)
        status = payload.pop("vendorStatus", payload.pop("vendor_status", None))
        if status is not None:
            self._check_status(status)
        try:
            if vendor_id is None:
                return await self.create_vendor(
                    VendorCreate.model_validate(payload), status=status or PENDING
                )
            update = VendorUpdate.model_validate(payload)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

        # Every check that can reject the status change runs before the
        # profile update is flushed.
        if status == APPROVED:
            current = await self._get_for_update(vendor_id)
            if not current.is_approved:
                await self._ensure_bundle_capacity(
                    update.selected_bundle or current.selected_bundle_id
                )

        vendor = await self.update_vendor(vendor_id, update)
        if status is not None and status != vendor.vendor_status:
            vendor = await self.update_status(vendor_id, status)
        return vendor

    # ------------------------------------------------------------------
    # Admin workflow
    # ------------------------------------------------------------------

    async def update_status(self, vendor_id: str, status: str) -> Vendor:
        self._check_status(status)
        vendor = await self._get_for_update(vendor_id)
        if status == APPROVED and not vendor.is_approved:
            await self._start_subscription(vendor)
        # Leaving approved keeps the subscription dates; counters are
        # decremented by the repository.
        vendor.vendor_status = status
        await self._repo.save(vendor)
        logger.info("Vendor %s status set to %s", vendor.id, status)
        return vendor

    async def update_custom_duration(
        self, vendor_id: str, custom_duration: CustomDurationIn | None
    ) -> Vendor:
        vendor = await self._get_for_update(vendor_id)
        vendor.custom_duration = (
            custom_duration.model_dump(by_alias=True) if custom_duration else None
        )
        if vendor.is_approved and vendor.subscription_start_date:
            await self._refresh_end_date(vendor)
        return await self._repo.save(vendor)

    async def update_custom_features(self, vendor_id: str, features: list[str]) -> Vendor:
        vendor = await self._get_for_update(vendor_id)
        vendor.custom_features = [f.strip() for f in features if f and f.strip()]
        return await self._repo.save(vendor)

    async def toggle_recommended(self, vendor_id: str) -> Vendor:
        vendor = await self._get_for_update(vendor_id)
        vendor.is_recommended = not vendor.is_recommended
        return await self._repo.save(vendor)

    async def delete_vendor(self, vendor_id: str) -> None:
        vendor = await self._get_for_update(vendor_id)
        await self._repo.delete(vendor)
        logger.info("Vendor %s deleted", vendor_id)

    async def purge_vendors(self, status: str) -> int:
        """Delete every vendor with ``status``."""
        self._check_status(status)
        deleted = await self._repo.delete_where(Vendor.vendor_status == status)
        logger.info("Purged %d %s vendor(s)", deleted, status)
        return deleted

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def expire_vendors(self, now: datetime | None = None) -> dict[str, Any]:
        """Expire approved vendors whose subscription ended before ``now``."""
        now = now or _utcnow()
        expired = await self._repo.update_where(
            Vendor.vendor_status == APPROVED,
            Vendor.subscription_end_date.is_not(None),
            Vendor.subscription_end_date < now,
            vendor_status=EXPIRED,
        )
        logger.info("Vendor expiration: expired %d vendor(s)", len(expired))
        return {"expired_count": len(expired), "timestamp": now}

    async def recalculate_counts(self) -> dict[str, int]:
        return await recalculate_counts(
            self._session, self._categories, self._subcategories, self._bundles
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_for_update(self, vendor_id: str) -> Vendor:
        vendor = await self._repo.get_for_update(vendor_id)
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    async def _start_subscription(self, vendor: Vendor) -> None:
        await self._ensure_bundle_capacity(vendor.selected_bundle_id)
        vendor.subscription_start_date = _utcnow()
        vendor.subscription_end_date = await self._resolver.end_date_for(
            vendor, vendor.subscription_start_date
        )

    async def _refresh_end_date(self, vendor: Vendor) -> None:
        end = await self._resolver.end_date_for(vendor, vendor.subscription_start_date)
        if end is not None:
            vendor.subscription_end_date = end

    async def _ensure_bundle_capacity(self, bundle_id: str) -> None:
        # Read-then-write; concurrent approvals can still overshoot max_vendors.
        bundle = await self._load_bundle(bundle_id)
        if bundle.has_reached_capacity:
            raise ConflictError(
                f"Bundle '{bundle.name}' has reached its capacity of {bundle.max_vendors} vendors"
            )

    async def _load_categories(self, ids: list[str]) -> list[Category]:
        found = await self._categories.get_many(ids)
        _require_all("Category", ids, found)
        return found

    async def _load_subcategories(self, ids: list[str]) -> list[SubCategory]:
        found = await self._subcategories.get_many(ids)
        _require_all("SubCategory", ids, found)
        return found

    async def _load_bundle(self, bundle_id: str) -> Bundle:
        bundle = await self._bundles.get_by_id(bundle_id)
        if not bundle:
            raise NotFoundError("Bundle", bundle_id)
        return bundle

    async def _check_conflicts(
        self,
        *,
        email: str | None,
        business_name: str | None,
        trade_license_number: str | None,
        exclude_id: str | None = None,
    ) -> None:
        existing = await self._repo.find_conflicts(
            email=email,
            business_name=business_name,
            trade_license_number=trade_license_number,
            exclude_id=exclude_id,
        )
        if not existing:
            return
        fields = []
        for other in existing:
            if email and other.email == email:
                fields.append("email")
            if business_name and other.business_name == business_name:
                fields.append("business name")
            if trade_license_number and other.trade_license_number == trade_license_number:
                fields.append("trade license number")
        taken = " and ".join(dict.fromkeys(fields))
        raise ConflictError(f"The {taken} you entered is already registered with another vendor")

    @staticmethod
    def _check_verification_fields(fields: dict[str, Any]) -> None:
        if fields.get("is_international"):
            return
        errors = [
            {"field": alias, "message": f"{label} is required for vendors based in the UAE"}
            for key, alias, label in (
                ("trade_license_number", "tradeLicenseNumber", "Trade License Number"),
                ("trade_license_copy", "tradeLicenseCopy", "Trade License copy"),
                ("emirates_id", "emiratesId", "Emirates ID"),
            )
            if not fields.get(key)
        ]
        if errors:
            raise ValidationError(
                "Please correct the following issues: "
                + ", ".join(e["message"] for e in errors),
                errors,
            )

    @staticmethod
    def _check_status(status: str) -> None:
        if status not in VENDOR_STATUSES:
            message = "Invalid status. Must be 'approved', 'pending', 'rejected', or 'expired'"
            raise ValidationError(message, [{"field": "vendorStatus", "message": message}])


def _blank_to_none(fields: dict[str, Any]) -> None:
    for key in ("trade_license_number", "trade_license_copy", "emirates_id"):
        if key in fields and not fields[key]:
            fields[key] = None


def _changed(vendor: Vendor, fields: dict[str, Any], key: str) -> Any:
    """New value of ``key`` if the update changes it, else None."""
    value = fields.get(key)
    if value is None or value == getattr(vendor, key):
        return None
    return value


def _verification_state(vendor: Vendor) -> dict[str, Any]:
    return {
        "is_international": vendor.is_international,
        "trade_license_number": vendor.trade_license_number,
        "trade_license_copy": vendor.trade_license_copy,
        "emirates_id": vendor.emirates_id,
    }


def _require_all(entity: str, ids: list[str], found: list) -> None:
    found_ids = {obj.id for obj in found}
    for entity_id in ids:
        if entity_id not in found_ids:
            raise NotFoundError(entity, entity_id)
