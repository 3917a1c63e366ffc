"""Expire approved vendors whose subscription end date has passed.

Usage: ``python -m app.jobs.vendor_expiration``, once a day.
"""


import asyncio
import logging
from datetime import datetime
from typing import Any

from app.db.base import session_scope
from app.services.vendor import VendorService

logger = logging.getLogger(__name__)


async def expire_vendors(now: datetime | None = None) -> dict[str, Any]:
    async with session_scope() as session:
        result = await VendorService(session).expire_vendors(now)
    logger.info("[JOB] vendor expiration: %s", result)
    return result


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(expire_vendors())
