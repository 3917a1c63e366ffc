"""Rebuild category/subcategory vendor counts and bundle subscriber counts.

Corrective tool for counter drift left by failed counter writes.
Usage: ``python -m app.jobs.recount``.
"""


import asyncio
import logging

from app.db.base import session_scope
from app.services.vendor import VendorService

logger = logging.getLogger(__name__)


async def recount() -> dict[str, int]:
    async with session_scope() as session:
        result = await VendorService(session).recalculate_counts()
    logger.info("[JOB] counter recount: %s", result)
    return result


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(recount())
