"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  vendor.py   — Vendor aggregate root + category association tables
  catalog.py  — Category, SubCategory, Bundle (denormalized counters live here)
  audit.py    — Immutable audit trail (never updated or deleted)
  mixins.py   — Shared IdMixin, TimestampMixin
"""

from app.domain.audit import AuditTrail
from app.domain.catalog import Bundle, Category, SubCategory
from app.domain.vendor import Vendor

__all__ = [
    "AuditTrail",
    "Bundle",
    "Category",
    "SubCategory",
    "Vendor",
]
