"""Vendor Pydantic schemas (request DTOs and response models)."""


from datetime import datetime
from typing import Any, Literal

from pydantic import EmailStr, Field, field_validator

from app.schemas.common import CamelModel

DurationUnit = Literal["days", "months", "years"]


class BonusPeriodIn(CamelModel):
    value: int = Field(default=0, ge=0)
    unit: DurationUnit = "months"


class CustomDurationIn(CamelModel):
    value: int = Field(ge=1)
    unit: DurationUnit
    bonus_period: BonusPeriodIn | None = None


class VendorCreate(CamelModel):
    owner_name: str = Field(min_length=1, max_length=255)
    owner_profile_image: str | None = None
    email: EmailStr
    phone_number: str = Field(min_length=1, max_length=50)
    password: str = Field(min_length=6, max_length=128)

    business_name: str = Field(min_length=1, max_length=255)
    business_logo: str = Field(min_length=1)
    tagline: str | None = Field(default=None, max_length=150)
    business_description: str = Field(min_length=50, max_length=1500)
    service_area_coverage: str | None = None
    years_of_experience: int = Field(default=0, ge=0)
    pricing_starting_from: float = Field(default=0, ge=0)

    is_international: bool = False
    trade_license_number: str | None = None
    trade_license_copy: str | None = None
    emirates_id: str | None = None

    address_street: str | None = None
    address_area: str | None = None
    address_city: str = Field(min_length=1)
    address_state: str | None = None
    address_country: str = Field(min_length=1)
    address_zip: str | None = None

    main_category: list[str] = Field(min_length=1)
    sub_categories: list[str] = Field(default_factory=list)
    selected_bundle: str = Field(min_length=1)

    model_config = {**CamelModel.model_config, "str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class VendorUpdate(CamelModel):
    owner_name: str | None = Field(default=None, min_length=1, max_length=255)
    owner_profile_image: str | None = None
    email: EmailStr | None = None
    phone_number: str | None = Field(default=None, min_length=1, max_length=50)
    password: str | None = Field(default=None, min_length=6, max_length=128)

    business_name: str | None = Field(default=None, min_length=1, max_length=255)
    business_logo: str | None = Field(default=None, min_length=1)
    tagline: str | None = Field(default=None, max_length=150)
    business_description: str | None = Field(default=None, min_length=50, max_length=1500)
    service_area_coverage: str | None = None
    years_of_experience: int | None = Field(default=None, ge=0)
    pricing_starting_from: float | None = Field(default=None, ge=0)

    is_international: bool | None = None
    trade_license_number: str | None = None
    trade_license_copy: str | None = None
    emirates_id: str | None = None

    address_street: str | None = None
    address_area: str | None = None
    address_city: str | None = Field(default=None, min_length=1)
    address_state: str | None = None
    address_country: str | None = Field(default=None, min_length=1)
    address_zip: str | None = None

    main_category: list[str] | None = Field(default=None, min_length=1)
    sub_categories: list[str] | None = None
    selected_bundle: str | None = Field(default=None, min_length=1)

    model_config = {**CamelModel.model_config, "str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str | None) -> str | None:
        return v.lower() if v else v


class VendorStatusUpdate(CamelModel):
    vendor_status: str


class VendorDurationUpdate(CamelModel):
    # null clears the override and falls back to the bundle
    custom_duration: CustomDurationIn | None = None


class VendorFeaturesUpdate(CamelModel):
    custom_features: list[str]


class VendorOut(CamelModel):
    id: str
    owner_name: str
    owner_profile_image: str | None = None
    email: str
    phone_number: str
    business_name: str
    slug: str
    business_logo: str
    tagline: str | None = None
    business_description: str
    service_area_coverage: str | None = None
    years_of_experience: int
    pricing_starting_from: float
    is_international: bool
    trade_license_number: str | None = None
    address_street: str | None = None
    address_area: str | None = None
    address_city: str
    address_state: str | None = None
    address_country: str
    address_zip: str | None = None
    vendor_status: str
    is_recommended: bool
    main_category_ids: list[str]
    sub_category_ids: list[str]
    selected_bundle_id: str
    subscription_start_date: datetime | None = None
    subscription_end_date: datetime | None = None
    custom_duration: dict[str, Any] | None = None
    custom_features: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class DurationOut(CamelModel):
    value: int
    unit: str


class SubscriptionDurationOut(CamelModel):
    base: DurationOut
    bonus: DurationOut | None = None
    source: str


class VendorDetailOut(VendorOut):
    all_features: list[str] = Field(default_factory=list)
    subscription_duration: SubscriptionDurationOut | None = None
