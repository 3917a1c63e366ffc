"""Category, subcategory and bundle routers."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import PaginationParams
from app.core.response import DataResponse, ListResponse, paginated
from app.db.base import get_db
from app.schemas.catalog import (
    BundleCreate,
    BundleOut,
    BundleUpdate,
    CategoryCreate,
    CategoryOut,
    SubCategoryCreate,
    SubCategoryOut,
)
from app.services.catalog import CatalogService

router = APIRouter(tags=["Catalog"])


def _svc(session: AsyncSession) -> CatalogService:
    return CatalogService(session)


# ------------------------------------------------------------------
# Categories
# ------------------------------------------------------------------

@router.get("/categories", response_model=ListResponse[CategoryOut])
async def list_categories(
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_categories(pagination)
    return paginated(
        [CategoryOut.model_validate(c) for c in items],
        total, pagination.page, pagination.limit,
    )


@router.post(
    "/categories", response_model=DataResponse[CategoryOut], status_code=status.HTTP_201_CREATED
)
async def create_category(body: CategoryCreate, session: AsyncSession = Depends(get_db)):
    category = await _svc(session).create_category(body)
    return {"data": CategoryOut.model_validate(category)}


@router.get("/categories/{category_id}", response_model=DataResponse[CategoryOut])
async def get_category(category_id: str, session: AsyncSession = Depends(get_db)):
    category = await _svc(session).get_category(category_id)
    return {"data": CategoryOut.model_validate(category)}


@router.get("/subcategories", response_model=ListResponse[SubCategoryOut])
async def list_subcategories(
    main_category_id: Optional[str] = Query(default=None, alias="mainCategory"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_subcategories(pagination, main_category_id)
    return paginated(
        [SubCategoryOut.model_validate(s) for s in items],
        total, pagination.page, pagination.limit,
    )


@router.post(
    "/subcategories",
    response_model=DataResponse[SubCategoryOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_subcategory(body: SubCategoryCreate, session: AsyncSession = Depends(get_db)):
    sub = await _svc(session).create_subcategory(body)
    return {"data": SubCategoryOut.model_validate(sub)}


# ------------------------------------------------------------------
# Bundles
# ------------------------------------------------------------------

@router.get("/bundles", response_model=ListResponse[BundleOut])
async def list_bundles(
    filter_status: Optional[str] = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    items, total = await _svc(session).list_bundles(pagination, status=filter_status)
    return paginated(
        [BundleOut.from_bundle(b) for b in items],
        total, pagination.page, pagination.limit,
    )


@router.post("/bundles", response_model=DataResponse[BundleOut], status_code=status.HTTP_201_CREATED)
async def create_bundle(body: BundleCreate, session: AsyncSession = Depends(get_db)):
    bundle = await _svc(session).create_bundle(body)
    return {"data": BundleOut.from_bundle(bundle)}


@router.get("/bundles/{bundle_id}", response_model=DataResponse[BundleOut])
async def get_bundle(bundle_id: str, session: AsyncSession = Depends(get_db)):
    bundle = await _svc(session).get_bundle(bundle_id)
    return {"data": BundleOut.from_bundle(bundle)}


@router.put("/bundles/{bundle_id}", response_model=DataResponse[BundleOut])
async def update_bundle(
    bundle_id: str, body: BundleUpdate, session: AsyncSession = Depends(get_db)
):
    bundle = await _svc(session).update_bundle(bundle_id, body)
    return {"data": BundleOut.from_bundle(bundle)}


@router.patch("/bundles/{bundle_id}/status", response_model=DataResponse[BundleOut])
async def toggle_bundle_status(bundle_id: str, session: AsyncSession = Depends(get_db)):
    bundle = await _svc(session).toggle_bundle_status(bundle_id)
    return {"data": BundleOut.from_bundle(bundle)}


@router.delete("/bundles/{bundle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bundle(bundle_id: str, session: AsyncSession = Depends(get_db)):
    await _svc(session).delete_bundle(bundle_id)
