"""Admin maintenance endpoints — manual triggers for the scheduled jobs."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.response import DataResponse
from app.db.base import get_db
from app.schemas.maintenance import ExpirationResult, RecountResult
from app.services.vendor import VendorService

router = APIRouter(prefix="/admin/maintenance", tags=["Admin"])


@router.post("/expire-vendors", response_model=DataResponse[ExpirationResult])
async def expire_vendors(session: AsyncSession = Depends(get_db)):
    result = await VendorService(session).expire_vendors()
    return {"data": ExpirationResult(**result)}


@router.post("/recount-counters", response_model=DataResponse[RecountResult])
async def recount_counters(session: AsyncSession = Depends(get_db)):
    """Rebuild every vendor/subscriber counter from the approved vendors."""
    result = await VendorService(session).recalculate_counts()
    return {"data": RecountResult(**result)}
