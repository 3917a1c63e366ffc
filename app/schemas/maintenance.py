"""Response models for the admin maintenance jobs."""


from datetime import datetime

from app.schemas.common import CamelModel


class ExpirationResult(CamelModel):
    expired_count: int
    timestamp: datetime


class RecountResult(CamelModel):
    total_approved_vendors: int
    categories_updated: int
    subcategories_updated: int
    bundles_updated: int
