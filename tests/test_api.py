"""HTTP-level tests: routers, auth header, error mapping. Repositories are in-memory."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import timedelta
from fastapi.testclient import TestClient
from jose import jwt

from permit_admin.config import settings
from permit_admin.dependencies import get_lot_repo, get_permit_repo, get_user_repo
from permit_admin.main import app
from permit_admin.security import create_access_token
from permit_admin.services.memory_repository import (
    InMemoryLotRepository, InMemoryPermitRepository, InMemoryUserRepository,
)


@pytest.fixture
def store(admin, editor, viewer, make_lot, make_permit):
    permit_a = make_permit(permit_id="permit-a", permit_number="PMT-100-2026", lot_id="lot-a")
    permit_b = make_permit(permit_id="permit-b", permit_number="PMT-200-2026", lot_id="lot-b")
    return {
        "permits": InMemoryPermitRepository([permit_a, permit_b]),
        "lots": InMemoryLotRepository([make_lot("lot-a", "Lot A"), make_lot("lot-b", "Lot B")]),
        "users": InMemoryUserRepository([admin, editor, viewer]),
    }


@pytest.fixture
def client(store):
    app.dependency_overrides[get_permit_repo] = lambda: store["permits"]
    app.dependency_overrides[get_lot_repo] = lambda: store["lots"]
    app.dependency_overrides[get_user_repo] = lambda: store["users"]
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def as_user(user):
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


def new_permit_body(**overrides):
    body = {
        "holder_name": "Sarah Johnson",
        "permit_type": "retail_tenant",
        "lot_id": "lot-a",
        "unit_number": "R-5",
        "occupant_status": "business_owner",
        "vehicle": {"make": "Honda", "model": "Civic", "license_plate": "XYZ-789"},
        "parking_spot_number": "R-3",
    }
    body.update(overrides)
    return body


class TestAuthentication:
    def test_missing_token_is_401(self, client):
        resp = client.get("/api/v1/permits")
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"

    def test_bare_user_id_header_is_not_trusted(self, client, admin):
        assert client.get("/api/v1/permits", headers={"X-User-Id": admin.id}).status_code == 401

    def test_token_for_unknown_user_is_401(self, client):
        headers = {"Authorization": f"Bearer {create_access_token('ghost')}"}
        assert client.get("/api/v1/permits", headers=headers).status_code == 401

    def test_garbage_token_is_401(self, client):
        headers = {"Authorization": "Bearer not-a-jwt"}
        assert client.get("/api/v1/permits", headers=headers).status_code == 401

    def test_token_signed_with_other_key_is_401(self, client, admin):
        forged = jwt.encode({"sub": admin.id}, "some-other-key", algorithm=settings.JWT_ALGORITHM)
        resp = client.get("/api/v1/permits", headers={"Authorization": f"Bearer {forged}"})
        assert resp.status_code == 401

    def test_expired_token_is_401(self, client, admin):
        token = create_access_token(admin.id, expires_delta=timedelta(minutes=-5))
        resp = client.get("/api/v1/permits", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_me(self, client, editor):
        resp = client.get("/api/v1/users/me", headers=as_user(editor))
        assert resp.status_code == 200
        assert resp.json()["role"] == "editor"


class TestPermitEndpoints:
    def test_listing_is_scoped_to_assigned_lots(self, client, admin, editor):
        admin_ids = {p["id"] for p in client.get("/api/v1/permits", headers=as_user(admin)).json()}
        editor_ids = {p["id"] for p in client.get("/api/v1/permits", headers=as_user(editor)).json()}
        assert admin_ids == {"permit-a", "permit-b"}
        assert editor_ids == {"permit-a"}

    def test_listing_includes_status(self, client, admin):
        permit = client.get("/api/v1/permits/permit-a", headers=as_user(admin)).json()
        assert permit["status"] == "active"
        assert permit["qr_identifier"].endswith("/permit/permit-a")

    def test_search_by_lot_name(self, client, admin):
        resp = client.get("/api/v1/permits", params={"q": "lot b"}, headers=as_user(admin))
        assert [p["id"] for p in resp.json()] == ["permit-b"]

    def test_foreign_permit_is_403(self, client, editor):
        assert client.get("/api/v1/permits/permit-b", headers=as_user(editor)).status_code == 403

    def test_missing_permit_is_404(self, client, admin):
        assert client.get("/api/v1/permits/nope", headers=as_user(admin)).status_code == 404

    def test_editor_creates_permit_with_generated_number(self, client, editor, store):
        resp = client.post("/api/v1/permits", json=new_permit_body(), headers=as_user(editor))
        assert resp.status_code == 201
        body = resp.json()
        assert body["permit_number"].startswith("PMT-")
        assert body["created_by"] == editor.id
        assert len(store["permits"].list_permits()) == 3

    def test_duplicate_permit_number_is_409(self, client, admin):
        resp = client.post("/api/v1/permits", json=new_permit_body(permit_number="PMT-100-2026"),
                           headers=as_user(admin))
        assert resp.status_code == 409

    def test_occupant_mismatch_is_422(self, client, admin):
        resp = client.post("/api/v1/permits",
                           json=new_permit_body(permit_type="resident", occupant_status="business_owner"),
                           headers=as_user(admin))
        assert resp.status_code == 422

    def test_create_in_unknown_lot_is_404(self, client, admin, store):
        resp = client.post("/api/v1/permits", json=new_permit_body(lot_id="lot-z"), headers=as_user(admin))
        assert resp.status_code == 404
        assert len(store["permits"].list_permits()) == 2

    def test_move_to_unknown_lot_is_404(self, client, admin, store):
        resp = client.patch("/api/v1/permits/permit-a", json={"lot_id": "lot-z"}, headers=as_user(admin))
        assert resp.status_code == 404
        assert store["permits"].get_by_id("permit-a").lot_id == "lot-a"

    def test_empty_lot_id_patch_is_422(self, client, editor, store):
        resp = client.patch("/api/v1/permits/permit-a", json={"lot_id": ""}, headers=as_user(editor))
        assert resp.status_code == 422
        assert store["permits"].get_by_id("permit-a").lot_id == "lot-a"

    def test_viewer_cannot_create(self, client, viewer):
        resp = client.post("/api/v1/permits", json=new_permit_body(lot_id="retail-1"), headers=as_user(viewer))
        assert resp.status_code == 403

    def test_patch_and_delete(self, client, editor, store):
        resp = client.patch("/api/v1/permits/permit-a", json={"is_active": False}, headers=as_user(editor))
        assert resp.status_code == 200
        assert resp.json()["status"] == "inactive"

        assert client.delete("/api/v1/permits/permit-a", headers=as_user(editor)).status_code == 200
        assert [p.id for p in store["permits"].list_permits()] == ["permit-b"]

    def test_stats(self, client, admin):
        stats = client.get("/api/v1/permits/stats", headers=as_user(admin)).json()
        assert stats["total"] == 2
        assert stats["active"] == 2


class TestScanEndpoint:
    def test_deep_link_scan_found(self, client, admin):
        resp = client.post("/api/v1/scan", json={"payload": "https://host/permit/permit-a"},
                           headers=as_user(admin))
        body = resp.json()
        assert body["outcome"] == "found"
        assert body["permit"]["permit_number"] == "PMT-100-2026"

    def test_forbidden_reported_as_not_found_by_default(self, client, editor):
        body = client.post("/api/v1/scan", json={"payload": "permit-b"}, headers=as_user(editor)).json()
        assert body["outcome"] == "not_found"
        assert body["permit"] is None

    def test_forbidden_visible_when_not_hidden(self, client, editor, monkeypatch):
        monkeypatch.setattr(settings, "SCAN_HIDE_FORBIDDEN", False)
        body = client.post("/api/v1/scan", json={"payload": "permit-b"}, headers=as_user(editor)).json()
        assert body["outcome"] == "forbidden"


class TestLotAndUserEndpoints:
    def test_lot_capacity_clamp(self, client, admin):
        resp = client.patch("/api/v1/lots/lot-a", json={"total_spots": 10}, headers=as_user(admin))
        assert resp.status_code == 200
        assert resp.json()["available_spots"] == 10

    def test_delete_referenced_lot_is_409(self, client, admin):
        assert client.delete("/api/v1/lots/lot-a", headers=as_user(admin)).status_code == 409

    def test_editor_cannot_create_lot(self, client, editor):
        resp = client.post("/api/v1/lots", json={"name": "Lot C", "total_spots": 5}, headers=as_user(editor))
        assert resp.status_code == 403

    def test_admin_updates_user_lots(self, client, admin, viewer):
        resp = client.patch(f"/api/v1/users/{viewer.id}", json={"assigned_lots": ["lot-a", "lot-b"]},
                            headers=as_user(admin))
        assert resp.status_code == 200
        assert sorted(resp.json()["assigned_lots"]) == ["lot-a", "lot-b"]

    def test_viewer_cannot_list_users(self, client, viewer):
        assert client.get("/api/v1/users", headers=as_user(viewer)).status_code == 403
