"""SQLAlchemy ORM models for the catalog: categories, subcategories and bundles.

``vendor_count`` and ``subscribers_count`` are denormalized counters owned by
the counter sync engine (app/services/counter_sync.py). Nothing else writes
them except the recount job.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.base import Base
from app.domain.mixins import IdMixin, TimestampMixin

DURATION_UNITS = ("days", "months", "years")
BUNDLE_STATUSES = ("active", "inactive")


class Category(Base, IdMixin, TimestampMixin):
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(180), nullable=False, unique=True, index=True)
    cover_image: Mapped[Optional[str]] = mapped_column(
        String(512), nullable=True, default="https://placehold.co/1200x600?text=Category+Cover"
    )
    vendor_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    subcategories: Mapped[list["SubCategory"]] = relationship(
        back_populates="main_category", lazy="raise"
    )


class SubCategory(Base, IdMixin, TimestampMixin):
    __tablename__ = "subcategories"

    name: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(180), nullable=False, unique=True, index=True)
    main_category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True
    )
    cover_image: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    is_popular: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_new: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    vendor_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    main_category: Mapped[Category] = relationship(back_populates="subcategories", lazy="raise")


class Bundle(Base, IdMixin, TimestampMixin):
    """A subscription tier."""

    __tablename__ = "bundles"

    name: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # "days" | "months" | "years"
    duration_value: Mapped[int] = mapped_column(Integer, nullable=False)
    duration_unit: Mapped[str] = mapped_column(String(10), default="months", nullable=False)
    bonus_value: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bonus_unit: Mapped[str] = mapped_column(String(10), default="months", nullable=False)
    bonus_description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    price: Mapped[float] = mapped_column(Float, nullable=False)
    features: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    # "active" | "inactive"
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)
    is_popular: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    includes_recommended: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_available_for_international: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # None = unlimited
    max_vendors: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    subscribers_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    @property
    def has_reached_capacity(self) -> bool:
        if self.max_vendors is None:
            return False
        return (self.subscribers_count or 0) >= self.max_vendors

    @property
    def available_slots(self) -> Optional[int]:
        if self.max_vendors is None:
            return None
        return max(self.max_vendors - (self.subscribers_count or 0), 0)
