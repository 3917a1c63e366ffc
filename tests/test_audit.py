import asyncio

import pytest

from app.core.config import settings
from app.middleware import audit
from app.middleware.audit import AuditMiddleware, _entity_from_path

VENDOR_ID = "3f2b8c1e-9a4d-4f6b-8e2a-1c5d7e9f0a3b"


@pytest.mark.parametrize(
    "path, expected",
    [
        (f"/api/v1/vendors/{VENDOR_ID}/status", ("vendor", VENDOR_ID)),
        (f"/api/v1/vendors/{VENDOR_ID}", ("vendor", VENDOR_ID)),
        ("/api/v1/vendors", ("vendor", None)),
        ("/api/v1/subcategories", ("subcategory", None)),
        (f"/api/v1/categories/{VENDOR_ID}", ("category", VENDOR_ID)),
        ("/api/v1/admin/maintenance/recount-counters", ("recount-counter", None)),
    ],
)
def test_entity_from_path(path, expected):
    assert _entity_from_path(path) == expected


async def test_audit_write_is_held_until_finished(client, monkeypatch):
    recorded = []

    async def record(self, request, status_code, duration_ms):
        await asyncio.sleep(0)
        recorded.append((request.method, status_code))

    monkeypatch.setattr(settings, "audit_enabled", True)
    monkeypatch.setattr(AuditMiddleware, "_record", record)

    resp = await client.post("/api/v1/admin/maintenance/recount-counters")
    assert resp.status_code == 200

    await asyncio.gather(*list(audit._pending_writes))
    assert recorded == [("POST", 200)]
    assert not audit._pending_writes


async def test_reads_are_not_audited(client, monkeypatch):
    monkeypatch.setattr(settings, "audit_enabled", True)
    monkeypatch.setattr(AuditMiddleware, "_record", pytest.fail)

    assert (await client.get("/health")).status_code == 200
    assert not audit._pending_writes
