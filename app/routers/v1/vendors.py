"""Vendor router — registration, profile and admin lifecycle endpoints.

Pattern:
  1. Inject DB session via Depends
  2. Instantiate the service with the session
  3. Call service methods and wrap result in response envelope
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.pagination import PaginationParams
from app.core.response import DataResponse, ListResponse, paginated
from app.db.base import get_db
from app.domain.vendor import Vendor
from app.schemas.vendor import (
    DurationOut,
    SubscriptionDurationOut,
    VendorCreate,
    VendorDetailOut,
    VendorDurationUpdate,
    VendorFeaturesUpdate,
    VendorOut,
    VendorStatusUpdate,
    VendorUpdate,
)
from app.services.subscription import ResolvedDuration
from app.services.vendor import VendorService

router = APIRouter(prefix="/vendors", tags=["Vendors"])


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _svc(session: AsyncSession) -> VendorService:
    return VendorService(session)


def _duration_out(resolved: ResolvedDuration | None) -> SubscriptionDurationOut | None:
    if resolved is None:
        return None
    return SubscriptionDurationOut(
        base=DurationOut(**resolved.base.as_dict()),
        bonus=DurationOut(**resolved.bonus.as_dict()) if resolved.bonus else None,
        source=resolved.source,
    )


async def _detail(svc: VendorService, vendor: Vendor) -> VendorDetailOut:
    out = VendorOut.model_validate(vendor).model_dump()
    return VendorDetailOut(
        **out,
        all_features=await svc.all_features(vendor),
        subscription_duration=_duration_out(await svc.resolve_duration(vendor)),
    )


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[VendorOut])
async def list_vendors(
    filter_status: Optional[str] = Query(
        default=None, alias="status", description="Filter by vendor status"
    ),
    pagination: PaginationParams = Depends(),
    session: AsyncSession = Depends(get_db),
):
    """List vendors (paginated). Filter by ?status=pending|approved|rejected|expired."""
    items, total = await _svc(session).list_vendors(pagination, status=filter_status)
    return paginated(
        [VendorOut.model_validate(v) for v in items],
        total, pagination.page, pagination.limit,
    )


@router.post("", response_model=DataResponse[VendorOut], status_code=status.HTTP_201_CREATED)
async def register_vendor(
    body: VendorCreate,
    session: AsyncSession = Depends(get_db),
):
    """Register a vendor. New vendors wait in ``pending`` for admin approval."""
    vendor = await _svc(session).create_vendor(body)
    return {"data": VendorOut.model_validate(vendor)}


@router.delete("", response_model=DataResponse[dict])
async def purge_vendors(
    purge_status: str = Query(..., alias="status", description="Delete all vendors with this status"),
    session: AsyncSession = Depends(get_db),
):
    deleted = await _svc(session).purge_vendors(purge_status)
    return {"data": {"deleted": deleted}}


@router.get("/{vendor_id}", response_model=DataResponse[VendorDetailOut])
async def get_vendor(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
):
    svc = _svc(session)
    vendor = await svc.get_vendor(vendor_id)
    return {"data": await _detail(svc, vendor)}


@router.put("/{vendor_id}", response_model=DataResponse[VendorDetailOut])
async def update_vendor(
    vendor_id: str,
    body: VendorUpdate,
    session: AsyncSession = Depends(get_db),
):
    svc = _svc(session)
    vendor = await svc.update_vendor(vendor_id, body)
    return {"data": await _detail(svc, vendor)}


@router.delete("/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vendor(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
):
    await _svc(session).delete_vendor(vendor_id)


@router.patch("/{vendor_id}/status", response_model=DataResponse[VendorDetailOut])
async def update_vendor_status(
    vendor_id: str,
    body: VendorStatusUpdate,
    session: AsyncSession = Depends(get_db),
):
    """Approve / reject / reset / expire a vendor. Approval stamps the subscription dates."""
    svc = _svc(session)
    vendor = await svc.update_status(vendor_id, body.vendor_status)
    return {"data": await _detail(svc, vendor)}


@router.patch("/{vendor_id}/duration", response_model=DataResponse[VendorDetailOut])
async def update_vendor_duration(
    vendor_id: str,
    body: VendorDurationUpdate,
    session: AsyncSession = Depends(get_db),
):
    """Set (or clear, with null) the admin override of the subscription duration."""
    svc = _svc(session)
    vendor = await svc.update_custom_duration(vendor_id, body.custom_duration)
    return {"data": await _detail(svc, vendor)}


@router.patch("/{vendor_id}/features", response_model=DataResponse[VendorDetailOut])
async def update_vendor_features(
    vendor_id: str,
    body: VendorFeaturesUpdate,
    session: AsyncSession = Depends(get_db),
):
    svc = _svc(session)
    vendor = await svc.update_custom_features(vendor_id, body.custom_features)
    return {"data": await _detail(svc, vendor)}


@router.patch("/{vendor_id}/recommended", response_model=DataResponse[VendorOut])
async def toggle_recommended(
    vendor_id: str,
    session: AsyncSession = Depends(get_db),
):
    vendor = await _svc(session).toggle_recommended(vendor_id)
    return {"data": VendorOut.model_validate(vendor)}
