"""Pagination for list endpoints (vendors, categories, subcategories, bundles)."""


import math

from fastapi import Query
from pydantic import BaseModel


class PaginationParams:
    """FastAPI dependency for `?page=1&limit=20&sort=createdAt&order=desc`.

    ``sort`` accepts either the camelCase field name used in responses or the
    column name; unknown fields fall back to unsorted.
    """

    def __init__(
        self,
        page: int = Query(default=1, ge=1, description="Page number (1-based)"),
        limit: int = Query(default=20, ge=1, le=100, description="Items per page"),
        sort: str = Query(default="created_at", description="Sort field"),
        order: str = Query(default="desc", pattern="^(asc|desc)$", description="Sort order"),
    ):
        self.page = page
        self.limit = limit
        self.sort = _to_snake(sort)
        self.order = order

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _to_snake(name: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in name).lstrip("_")


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        return cls(
            total=total,
            page=page,
            limit=limit,
            pages=math.ceil(total / limit) if limit else 1,
        )
