"""SQLAlchemy ORM model for Vendors.

Category membership lives in two association tables. The bundle is a plain
foreign-key column so its previous value shows up in the attribute history
the counter sync engine reads.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.catalog import Category, SubCategory
from app.domain.mixins import IdMixin, TimestampMixin

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"
EXPIRED = "expired"
VENDOR_STATUSES = (PENDING, APPROVED, REJECTED, EXPIRED)

vendor_categories = Table(
    "vendor_categories",
    Base.metadata,
    Column("vendor_id", String(36), ForeignKey("vendors.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    ),
)

vendor_subcategories = Table(
    "vendor_subcategories",
    Base.metadata,
    Column("vendor_id", String(36), ForeignKey("vendors.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "subcategory_id",
        String(36),
        ForeignKey("subcategories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class Vendor(Base, IdMixin, TimestampMixin):
    __tablename__ = "vendors"
    __table_args__ = (
        # International vendors have no trade license, so uniqueness only
        # applies to rows that carry one.
        Index(
            "uq_vendors_trade_license_number",
            "trade_license_number",
            unique=True,
            sqlite_where=text("trade_license_number IS NOT NULL"),
            postgresql_where=text("trade_license_number IS NOT NULL"),
        ),
    )

    # Owner
    owner_name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_profile_image: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    phone_number: Mapped[str] = mapped_column(String(50), nullable=False)
    password_hash: Mapped[str] = mapped_column(
        String(255), nullable=False, deferred=True, deferred_raiseload=True
    )

    # Business
    business_name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(300), nullable=False, unique=True, index=True)
    business_logo: Mapped[str] = mapped_column(String(512), nullable=False)
    tagline: Mapped[Optional[str]] = mapped_column(String(150), nullable=True, default="")
    business_description: Mapped[str] = mapped_column(Text, nullable=False)
    service_area_coverage: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    years_of_experience: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    pricing_starting_from: Mapped[float] = mapped_column(Float, default=0, nullable=False)

    # Verification (not required for international vendors)
    is_international: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    trade_license_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    trade_license_copy: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    emirates_id: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)

    address_street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address_area: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    address_city: Mapped[str] = mapped_column(String(100), nullable=False)
    address_state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    address_country: Mapped[str] = mapped_column(String(100), nullable=False)
    address_zip: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # "pending" | "approved" | "rejected" | "expired"
    vendor_status: Mapped[str] = mapped_column(
        String(20), default=PENDING, nullable=False, index=True
    )
    is_recommended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Subscription
    selected_bundle_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("bundles.id"), nullable=False, index=True
    )
    subscription_start_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    subscription_end_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, index=True
    )
    # {"value": 3, "unit": "months", "bonusPeriod": {"value": 10, "unit": "days"}}
    custom_duration: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    custom_features: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    main_categories: Mapped[List[Category]] = relationship(
        secondary=vendor_categories, lazy="selectin"
    )
    sub_categories: Mapped[List[SubCategory]] = relationship(
        secondary=vendor_subcategories, lazy="selectin"
    )

    @property
    def main_category_ids(self) -> list[str]:
        return [c.id for c in self.main_categories]

    @property
    def sub_category_ids(self) -> list[str]:
        return [s.id for s in self.sub_categories]

    @property
    def is_approved(self) -> bool:
        return self.vendor_status == APPROVED
