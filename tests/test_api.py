"""HTTP surface: envelopes, camelCase payloads, error mapping and the approval flow."""

import pytest

from tests.helpers import DESCRIPTION


@pytest.fixture
async def seeded(session, catalog):
    await session.commit()
    return catalog


def _registration(catalog, **overrides):
    body = {
        "ownerName": "Omar Haddad",
        "email": "omar@example.com",
        "phoneNumber": "+971501234567",
        "password": "secret123",
        "businessName": "Haddad Events",
        "businessLogo": "https://cdn.example.com/haddad.png",
        "businessDescription": DESCRIPTION,
        "tradeLicenseNumber": "TL-777",
        "tradeLicenseCopy": "https://cdn.example.com/tl.pdf",
        "emiratesId": "https://cdn.example.com/eid.pdf",
        "addressCity": "Dubai",
        "addressCountry": "United Arab Emirates",
        "mainCategory": [catalog["A"].id],
        "subCategories": [catalog["S"].id],
        "selectedBundle": catalog["yearly"].id,
    }
    body.update(overrides)
    return body


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["env"] == "test"


async def test_register_then_approve_updates_counters(client, seeded):
    resp = await client.post("/api/v1/vendors", json=_registration(seeded))
    assert resp.status_code == 201
    vendor = resp.json()["data"]
    assert vendor["vendorStatus"] == "pending"
    assert vendor["slug"] == "haddad-events"
    assert "password" not in vendor and "passwordHash" not in vendor

    resp = await client.patch(
        f"/api/v1/vendors/{vendor['id']}/status", json={"vendorStatus": "approved"}
    )
    assert resp.status_code == 200
    detail = resp.json()["data"]
    assert detail["vendorStatus"] == "approved"
    assert detail["subscriptionEndDate"] is not None
    assert detail["allFeatures"] == ["Listing", "Badge"]
    assert detail["subscriptionDuration"] == {
        "base": {"value": 1, "unit": "years"},
        "bonus": None,
        "source": "bundle",
    }

    category = (await client.get(f"/api/v1/categories/{seeded['A'].id}")).json()["data"]
    assert category["vendorCount"] == 1
    bundle = (await client.get(f"/api/v1/bundles/{seeded['yearly'].id}")).json()["data"]
    assert bundle["subscribersCount"] == 1

    resp = await client.delete(f"/api/v1/vendors/{vendor['id']}")
    assert resp.status_code == 204
    category = (await client.get(f"/api/v1/categories/{seeded['A'].id}")).json()["data"]
    assert category["vendorCount"] == 0


async def test_custom_duration_endpoint(client, seeded):
    vendor = (await client.post("/api/v1/vendors", json=_registration(seeded))).json()["data"]

    resp = await client.patch(
        f"/api/v1/vendors/{vendor['id']}/duration",
        json={"customDuration": {"value": 2, "unit": "months", "bonusPeriod": {"value": 15, "unit": "days"}}},
    )
    assert resp.status_code == 200
    duration = resp.json()["data"]["subscriptionDuration"]
    assert duration["source"] == "custom"
    assert duration["bonus"] == {"value": 15, "unit": "days"}


async def test_list_vendors_is_paginated(client, seeded):
    await client.post("/api/v1/vendors", json=_registration(seeded))
    resp = await client.get("/api/v1/vendors", params={"status": "pending", "limit": 5})
    body = resp.json()
    assert resp.status_code == 200
    assert body["meta"] == {"total": 1, "page": 1, "limit": 5, "pages": 1}
    assert body["data"][0]["businessName"] == "Haddad Events"


async def test_request_validation_envelope(client, seeded):
    resp = await client.post(
        "/api/v1/vendors", json=_registration(seeded, businessDescription="Too short")
    )
    assert resp.status_code == 422
    error = resp.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["message"].startswith("Please correct the following issues")
    assert [d["field"] for d in error["details"]] == ["businessDescription"]


async def test_missing_documents_for_domestic_vendor(client, seeded):
    resp = await client.post(
        "/api/v1/vendors", json=_registration(seeded, tradeLicenseNumber="", emiratesId=None)
    )
    assert resp.status_code == 422
    fields = [d["field"] for d in resp.json()["error"]["details"]]
    assert fields == ["tradeLicenseNumber", "emiratesId"]


async def test_duplicate_registration_conflicts(client, seeded):
    assert (await client.post("/api/v1/vendors", json=_registration(seeded))).status_code == 201

    resp = await client.post(
        "/api/v1/vendors",
        json=_registration(seeded, businessName="Other Name", tradeLicenseNumber="TL-778"),
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "CONFLICT"


async def test_invalid_status_is_rejected(client, seeded):
    vendor = (await client.post("/api/v1/vendors", json=_registration(seeded))).json()["data"]
    resp = await client.patch(
        f"/api/v1/vendors/{vendor['id']}/status", json={"vendorStatus": "archived"}
    )
    assert resp.status_code == 422
    assert resp.json()["error"]["details"][0]["field"] == "vendorStatus"


async def test_unknown_vendor_is_404(client, seeded):
    resp = await client.get("/api/v1/vendors/does-not-exist")
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


async def test_maintenance_endpoints(client, seeded):
    vendor = (await client.post("/api/v1/vendors", json=_registration(seeded))).json()["data"]
    await client.patch(f"/api/v1/vendors/{vendor['id']}/status", json={"vendorStatus": "approved"})

    recount = (await client.post("/api/v1/admin/maintenance/recount-counters")).json()["data"]
    assert recount["totalApprovedVendors"] == 1
    assert recount["bundlesUpdated"] == 1

    expired = (await client.post("/api/v1/admin/maintenance/expire-vendors")).json()["data"]
    assert expired["expiredCount"] == 0


async def test_purge_by_status(client, seeded):
    vendor = (await client.post("/api/v1/vendors", json=_registration(seeded))).json()["data"]
    await client.patch(f"/api/v1/vendors/{vendor['id']}/status", json={"vendorStatus": "rejected"})

    resp = await client.delete("/api/v1/vendors", params={"status": "rejected"})
    assert resp.json()["data"] == {"deleted": 1}
    assert (await client.get(f"/api/v1/vendors/{vendor['id']}")).status_code == 404
