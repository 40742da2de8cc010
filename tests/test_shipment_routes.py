"""
tests/test_shipment_routes.py -- Integration tests for tracking, shipment,
user and admin routes.

Coverage:
  - GET /track: public view for anonymous, bad-token, expired-token and
    non-owner callers,
    full view for the owner, case-insensitive lookup, 404 for unknown numbers
  - POST /shipments: 201 with caller as owner, 400 on missing fields with no
    record created, admin create on behalf of another user
  - PUT /shipments/{n}/status: +1 history entry, 403 for non-owners with
    history unchanged, 404 before ownership, admin may update unowned records
  - GET /shipments scoping by role
  - /user/* self-service routes and /admin/* role gating

Fixtures used (from conftest.py):
  - api_client with stores pre-loaded with the demo dataset. The demo
    customer owns FF123456789; FF987654321 has no owner.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from auth.tokens import create_access_token

OWNED = "FF123456789"
LEGACY = "FF987654321"
PUBLIC_KEYS = {
    "trackingNumber",
    "status",
    "origin",
    "destination",
    "currentLocation",
    "estimatedDelivery",
    "actualDelivery",
    "service",
    "history",
}


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _new_customer_token(ctx, email: str) -> str:
    resp = ctx.client.post(
        "/api/auth/signup",
        json={"firstName": "Other", "lastName": "Customer", "email": email, "password": "pw-12345"},
    )
    assert resp.status_code == 201, f"Signup failed: {resp.text}"
    return resp.json()["token"]


def _create(ctx, token: str, **body):
    payload = {"origin": "Lyon, FR", "destination": "Madrid, ES", "weight": "4 kg"}
    payload.update(body)
    return ctx.client.post("/api/shipments", json=payload, headers=auth_header(token))


class TestTracking:
    def test_anonymous_gets_public_view(self, api_client) -> None:
        resp = api_client.client.get(f"/api/track/{OWNED}")
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert set(data) == PUBLIC_KEYS
        assert data["trackingNumber"] == OWNED
        assert len(data["history"]) >= 3

    def test_lookup_is_case_insensitive(self, api_client) -> None:
        resp = api_client.client.get(f"/api/track/{OWNED.lower()}")
        assert resp.status_code == 200
        assert resp.json()["data"]["trackingNumber"] == OWNED

    def test_malformed_token_still_gets_public_view(self, api_client) -> None:
        resp = api_client.client.get(f"/api/track/{OWNED}", headers=auth_header("not-a-token"))
        assert resp.status_code == 200
        assert set(resp.json()["data"]) == PUBLIC_KEYS

    def test_expired_owner_token_gets_public_view(self, api_client) -> None:
        issued = datetime.now(timezone.utc) - timedelta(hours=25)
        token = create_access_token(api_client.customer_id, "demo@parceltrack.example", "customer", now=issued)
        resp = api_client.client.get(f"/api/track/{OWNED}", headers=auth_header(token))
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}"
        assert set(resp.json()["data"]) == PUBLIC_KEYS

    def test_owner_gets_full_view(self, api_client) -> None:
        resp = api_client.client.get(f"/api/track/{OWNED}", headers=auth_header(api_client.customer_token))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert PUBLIC_KEYS < set(data)
        assert data["userId"] == api_client.customer_id
        assert data["weight"] == "2.5 kg"

    def test_non_owner_gets_public_view(self, api_client) -> None:
        token = _new_customer_token(api_client, "tracker@example.com")
        resp = api_client.client.get(f"/api/track/{OWNED}", headers=auth_header(token))
        assert set(resp.json()["data"]) == PUBLIC_KEYS

    def test_unowned_legacy_record_is_public(self, api_client) -> None:
        resp = api_client.client.get(f"/api/track/{LEGACY}", headers=auth_header(api_client.customer_token))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert set(data) == PUBLIC_KEYS
        assert data["status"] == "Delivered"
        assert data["actualDelivery"] == "2025-01-08"

    def test_unknown_tracking_number_404(self, api_client) -> None:
        resp = api_client.client.get("/api/track/FF000000000")
        assert resp.status_code == 404
        data = resp.json()
        assert data["success"] is False
        assert data["message"].startswith("Tracking number not found")


class TestCreateShipment:
    def test_create_sets_owner_and_initial_history(self, api_client) -> None:
        resp = _create(api_client, api_client.customer_token, dimensions="40x30x20 cm")
        assert resp.status_code == 201, f"Expected 201, got {resp.status_code}: {resp.text}"
        body = resp.json()
        assert body["message"] == "Shipment created successfully"
        data = body["data"]
        assert data["trackingNumber"].startswith("FF")
        assert data["status"] == "Processing"
        assert data["service"] == "Standard Shipping"
        assert data["currentLocation"] == "Lyon, FR"
        assert data["userId"] == api_client.customer_id
        assert data["estimatedDelivery"]
        assert [h["status"] for h in data["history"]] == ["Order received"]

        mine = api_client.client.get("/api/user/shipments", headers=auth_header(api_client.customer_token))
        assert data["trackingNumber"] in {s["trackingNumber"] for s in mine.json()["data"]}

    def test_create_requires_auth(self, api_client) -> None:
        resp = api_client.client.post("/api/shipments", json={"origin": "A", "destination": "B", "weight": "1 kg"})
        assert resp.status_code == 401

    def test_missing_destination_rejected_without_side_effects(self, api_client) -> None:
        before = api_client.shipment_store.count()
        resp = api_client.client.post(
            "/api/shipments",
            json={"origin": "Lyon, FR", "weight": "4 kg"},
            headers=auth_header(api_client.customer_token),
        )
        assert resp.status_code == 400, f"Expected 400, got {resp.status_code}"
        assert "destination" in resp.json()["message"]
        assert api_client.shipment_store.count() == before

    def test_blank_origin_rejected(self, api_client) -> None:
        resp = _create(api_client, api_client.customer_token, origin="   ")
        assert resp.status_code == 400

    def test_customer_cannot_assign_other_owner(self, api_client) -> None:
        resp = _create(api_client, api_client.customer_token, userId=api_client.admin_id)
        assert resp.status_code == 201
        assert resp.json()["data"]["userId"] == api_client.customer_id

    def test_admin_creates_on_behalf_of_user(self, api_client) -> None:
        resp = _create(api_client, api_client.admin_token, userId=api_client.customer_id, service="Express")
        assert resp.status_code == 201
        assert resp.json()["data"]["userId"] == api_client.customer_id
        assert resp.json()["data"]["service"] == "Express"

    def test_admin_create_for_unknown_user_404(self, api_client) -> None:
        resp = _create(api_client, api_client.admin_token, userId=9999)
        assert resp.status_code == 404


class TestStatusUpdate:
    def test_owner_update_appends_one_entry(self, api_client) -> None:
        created = _create(api_client, api_client.customer_token).json()["data"]
        n = created["trackingNumber"]
        resp = api_client.client.put(
            f"/api/shipments/{n}/status",
            json={"status": "In Transit", "location": "Barcelona, ES"},
            headers=auth_header(api_client.customer_token),
        )
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        data = resp.json()["data"]
        assert data["status"] == "In Transit"
        assert data["currentLocation"] == "Barcelona, ES"
        assert len(data["history"]) == len(created["history"]) + 1
        last = data["history"][-1]
        assert last["status"] == "In Transit"
        assert last["description"] == "Status updated to In Transit"

    def test_current_location_alias_accepted(self, api_client) -> None:
        n = _create(api_client, api_client.customer_token).json()["data"]["trackingNumber"]
        resp = api_client.client.put(
            f"/api/shipments/{n}/status",
            json={"status": "Arrived", "currentLocation": "Valencia, ES", "description": "At depot"},
            headers=auth_header(api_client.customer_token),
        )
        last = resp.json()["data"]["history"][-1]
        assert last["location"] == "Valencia, ES"
        assert last["description"] == "At depot"

    def test_non_owner_forbidden_and_history_unchanged(self, api_client) -> None:
        token = _new_customer_token(api_client, "intruder@example.com")
        before = len(api_client.shipment_store.get_by_tracking_number(OWNED).history)
        resp = api_client.client.put(
            f"/api/shipments/{OWNED}/status",
            json={"status": "Lost"},
            headers=auth_header(token),
        )
        assert resp.status_code == 403, f"Expected 403, got {resp.status_code}"
        assert len(api_client.shipment_store.get_by_tracking_number(OWNED).history) == before
        assert api_client.shipment_store.get_by_tracking_number(OWNED).status != "Lost"

    def test_customer_cannot_update_unowned_record(self, api_client) -> None:
        resp = api_client.client.put(
            f"/api/shipments/{LEGACY}/status",
            json={"status": "Returned"},
            headers=auth_header(api_client.customer_token),
        )
        assert resp.status_code == 403

    def test_admin_can_update_after_delivered(self, api_client) -> None:
        before = len(api_client.shipment_store.get_by_tracking_number(LEGACY).history)
        resp = api_client.client.put(
            f"/api/shipments/{LEGACY}/status",
            json={"status": "Returned to sender"},
            headers=auth_header(api_client.admin_token),
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["status"] == "Returned to sender"
        assert data["currentLocation"] == "Atlanta, GA"
        assert len(data["history"]) == before + 1

    def test_unknown_shipment_404_before_ownership(self, api_client) -> None:
        token = _new_customer_token(api_client, "nobody.owns@example.com")
        resp = api_client.client.put(
            "/api/shipments/FF000000001/status",
            json={"status": "In Transit"},
            headers=auth_header(token),
        )
        assert resp.status_code == 404

    def test_missing_status_rejected(self, api_client) -> None:
        resp = api_client.client.put(
            f"/api/shipments/{OWNED}/status",
            json={"location": "Somewhere"},
            headers=auth_header(api_client.customer_token),
        )
        assert resp.status_code == 400
        assert "status" in resp.json()["message"]

    def test_update_requires_auth(self, api_client) -> None:
        resp = api_client.client.put(f"/api/shipments/{OWNED}/status", json={"status": "x"})
        assert resp.status_code == 401


class TestShipmentLists:
    def test_customer_sees_only_own(self, api_client) -> None:
        resp = api_client.client.get("/api/shipments", headers=auth_header(api_client.customer_token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == len(body["data"])
        assert {s["userId"] for s in body["data"]} == {api_client.customer_id}
        assert LEGACY not in {s["trackingNumber"] for s in body["data"]}

    def test_admin_sees_all(self, api_client) -> None:
        resp = api_client.client.get("/api/shipments", headers=auth_header(api_client.admin_token))
        numbers = {s["trackingNumber"] for s in resp.json()["data"]}
        assert {OWNED, LEGACY} <= numbers
        assert resp.json()["count"] == api_client.shipment_store.count()


class TestUserRoutes:
    def test_profile(self, api_client) -> None:
        resp = api_client.client.get("/api/user/profile", headers=auth_header(api_client.customer_token))
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["id"] == api_client.customer_id
        assert data["firstName"] == "Demo"
        assert "password" not in data and "hashedPassword" not in data

    def test_profile_requires_auth(self, api_client) -> None:
        assert api_client.client.get("/api/user/profile").status_code == 401

    def test_vault_for_vault_customer(self, api_client) -> None:
        resp = api_client.client.get("/api/user/vault", headers=auth_header(api_client.customer_token))
        assert resp.status_code == 200
        assert resp.json()["data"]["gold"]["amount"] == "110 kilograms"

    def test_vault_404_without_assets(self, api_client) -> None:
        resp = api_client.client.get("/api/user/vault", headers=auth_header(api_client.admin_token))
        assert resp.status_code == 404
        assert resp.json()["message"] == "No vault assets found"

    def test_user_shipments_include_vault_record(self, api_client) -> None:
        resp = api_client.client.get("/api/user/shipments", headers=auth_header(api_client.customer_token))
        records = {s["trackingNumber"]: s for s in resp.json()["data"]}
        assert OWNED in records
        assert records["FS2001ASSETS"]["details"]["assetType"] == "precious_metals_diamonds"


class TestAdminRoutes:
    def test_customer_forbidden(self, api_client) -> None:
        for path in ("/api/admin/users", "/api/admin/shipments"):
            resp = api_client.client.get(path, headers=auth_header(api_client.customer_token))
            assert resp.status_code == 403, f"{path}: expected 403, got {resp.status_code}"
            assert resp.json()["message"] == "Admin access required"

    def test_anonymous_unauthorized(self, api_client) -> None:
        assert api_client.client.get("/api/admin/users").status_code == 401

    def test_admin_lists_users_without_passwords(self, api_client) -> None:
        resp = api_client.client.get("/api/admin/users", headers=auth_header(api_client.admin_token))
        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == api_client.user_store.count()
        for user in body["data"]:
            assert "password" not in user and "hashedPassword" not in user

    def test_admin_lists_all_shipments(self, api_client) -> None:
        resp = api_client.client.get("/api/admin/shipments", headers=auth_header(api_client.admin_token))
        assert resp.status_code == 200
        assert resp.json()["count"] == api_client.shipment_store.count()
