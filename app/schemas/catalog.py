"""Category, SubCategory and Bundle schemas."""


from datetime import datetime
from typing import Literal

from pydantic import Field

from app.domain.catalog import Bundle
from app.schemas.common import CamelModel
from app.schemas.vendor import BonusPeriodIn, DurationUnit


class CategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=150)
    cover_image: str | None = None


class CategoryOut(CamelModel):
    id: str
    name: str
    slug: str
    cover_image: str | None = None
    vendor_count: int
    created_at: datetime


class SubCategoryCreate(CamelModel):
    name: str = Field(min_length=1, max_length=150)
    main_category_id: str
    cover_image: str | None = None
    is_popular: bool = False
    is_new: bool = False


class SubCategoryOut(CamelModel):
    id: str
    name: str
    slug: str
    main_category_id: str
    cover_image: str | None = None
    is_popular: bool
    is_new: bool
    vendor_count: int
    created_at: datetime


# ---------------------------------------------------------------------------
# Bundles
# ---------------------------------------------------------------------------

class DurationIn(CamelModel):
    value: int = Field(ge=1)
    unit: DurationUnit = "months"


class BundleBonusIn(BonusPeriodIn):
    description: str | None = None


class BundleCreate(CamelModel):
    name: str = Field(min_length=1, max_length=150)
    description: str | None = None
    duration: DurationIn
    bonus_period: BundleBonusIn | None = None
    price: float = Field(ge=0)
    features: list[str] = Field(default_factory=list)
    is_popular: bool = False
    includes_recommended: bool = False
    is_available_for_international: bool = True
    max_vendors: int | None = Field(default=None, ge=1)
    status: Literal["active", "inactive"] = "active"
    display_order: int = 0


class BundleUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    description: str | None = None
    duration: DurationIn | None = None
    bonus_period: BundleBonusIn | None = None
    price: float | None = Field(default=None, ge=0)
    features: list[str] | None = None
    is_popular: bool | None = None
    includes_recommended: bool | None = None
    is_available_for_international: bool | None = None
    max_vendors: int | None = Field(default=None, ge=1)
    status: Literal["active", "inactive"] | None = None
    display_order: int | None = None


class BundleBonusOut(CamelModel):
    value: int
    unit: str
    description: str | None = None


class BundleOut(CamelModel):
    id: str
    name: str
    description: str | None = None
    duration: DurationIn
    bonus_period: BundleBonusOut
    price: float
    features: list[str]
    status: str
    is_popular: bool
    includes_recommended: bool
    is_available_for_international: bool
    display_order: int
    max_vendors: int | None = None
    subscribers_count: int
    has_reached_capacity: bool
    available_slots: int | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_bundle(cls, bundle: Bundle) -> "BundleOut":
        return cls(
            id=bundle.id,
            name=bundle.name,
            description=bundle.description,
            duration=DurationIn(value=bundle.duration_value, unit=bundle.duration_unit),
            bonus_period=BundleBonusOut(
                value=bundle.bonus_value,
                unit=bundle.bonus_unit,
                description=bundle.bonus_description,
            ),
            price=bundle.price,
            features=list(bundle.features or []),
            status=bundle.status,
            is_popular=bundle.is_popular,
            includes_recommended=bundle.includes_recommended,
            is_available_for_international=bundle.is_available_for_international,
            display_order=bundle.display_order,
            max_vendors=bundle.max_vendors,
            subscribers_count=bundle.subscribers_count,
            has_reached_capacity=bundle.has_reached_capacity,
            available_slots=bundle.available_slots,
            created_at=bundle.created_at,
            updated_at=bundle.updated_at,
        )
