"""Audit logging middleware — records every state-changing request to audit_trail."""


import asyncio
import logging
import time
from collections.abc import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings

logger = logging.getLogger(__name__)

# Methods that mutate state
_WRITE_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# Path segments that are actions, not entities: /vendors/{id}/status -> ("vendor", id)
_ACTION_SEGMENTS = {"status", "duration", "features", "recommended"}

# Strong references to in-flight audit writes until they finish
_pending_writes: set[asyncio.Task] = set()


def _singular(name: str) -> str:
    if name.endswith("ies"):
        return name[:-3] + "y"
    return name.rstrip("s")


def _entity_from_path(path: str) -> tuple[str, str | None]:
    """``/api/v1/vendors/<id>/status`` -> ``("vendor", "<id>")``."""
    parts = [p for p in path.strip("/").split("/") if p]
    if parts and parts[-1] in _ACTION_SEGMENTS:
        parts = parts[:-1]
    if len(parts) >= 2 and len(parts[-1]) == 36:
        return _singular(parts[-2]), parts[-1]
    return (_singular(parts[-1]) if parts else "unknown"), None


class AuditMiddleware(BaseHTTPMiddleware):
    """Logs all write operations.

    Each audit row is written in a background task AFTER the response is sent
    so it never adds latency to the request. Failures are logged, never raised.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000)

        if settings.audit_enabled and request.method in _WRITE_METHODS:
            task = asyncio.create_task(
                self._record(request, response.status_code, duration_ms)
            )
            _pending_writes.add(task)
            task.add_done_callback(_pending_writes.discard)

        return response

    async def _record(
        self, request: Request, status_code: int, duration_ms: int
    ) -> None:
        try:
            from app.db.base import async_session_factory
            from app.domain.audit import AuditTrail

            entity_type, entity_id = _entity_from_path(request.url.path)
            async with async_session_factory() as session:
                session.add(
                    AuditTrail(
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                        action=f"{request.method}:{status_code}",
                        entity_type=entity_type,
                        entity_id=entity_id,
                        duration_ms=duration_ms,
                        description=f"{request.method} {request.url.path} -> {status_code}",
                    )
                )
                await session.commit()
        except Exception:  # pragma: no cover
            logger.exception("Failed to write audit row for %s %s", request.method, request.url.path)
