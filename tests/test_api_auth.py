from datetime import timedelta

import pytest

from conftest import auth, register
from pichost.routers import ROUTE_TABLE, Access

PROTECTED_ROUTES = [r for r in ROUTE_TABLE if r.access is Access.PROTECTED]


def test_register_and_me(client):
    token = register(client, "alice")
    resp = client.get("/api/auth/me", headers=auth(token))
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["username"] == "alice"
    assert "password_hash" not in body["data"]


def test_register_duplicate_username(client):
    register(client, "alice")
    resp = client.post("/api/auth/register", json={"username": "Alice", "password": "password123"})
    assert resp.status_code == 409
    assert resp.json()["code"] == "user_exists"


def test_register_validates_input(client):
    resp = client.post("/api/auth/register", json={"username": "a b", "password": "short"})
    assert resp.status_code == 422
    assert resp.json()["code"] == "validation_error"


def test_login_success_and_failure_bodies(client):
    register(client, "alice")
    ok = client.post("/api/auth/login", json={"username": "alice", "password": "password123"})
    assert ok.status_code == 200
    assert ok.json()["data"]["token_type"] == "bearer"
    assert ok.json()["data"]["expires_in"] > 0

    wrong_password = client.post("/api/auth/login", json={"username": "alice", "password": "nope-nope"})
    unknown_user = client.post("/api/auth/login", json={"username": "mallory", "password": "password123"})
    assert wrong_password.status_code == unknown_user.status_code == 401
    assert wrong_password.json() == unknown_user.json()


@pytest.mark.parametrize("route", PROTECTED_ROUTES, ids=lambda r: f"{r.method} {r.path}")
def test_protected_routes_reject_missing_token(client, route):
    path = "/api" + route.path.replace("{image_id}", "1")
    resp = client.request(route.method, path)
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["code"] == "auth_invalid"


def test_public_routes_are_declared_public():
    public = {(r.method, r.path) for r in ROUTE_TABLE if r.access is Access.PUBLIC}
    assert public == {
        ("POST", "/auth/register"),
        ("POST", "/auth/login"),
        ("GET", "/gallery/{slug}"),
    }


def test_tampered_token_is_rejected(client):
    token = register(client, "alice")
    sig_start = token.rindex(".") + 1
    flipped = token[:sig_start] + ("A" if token[sig_start] != "A" else "B") + token[sig_start + 1:]
    resp = client.get("/api/images", headers=auth(flipped))
    assert resp.status_code == 401
    assert resp.json()["code"] == "auth_invalid"


def test_expired_token_is_rejected(client, app):
    token = register(client, "alice")
    user_id = app.state.token_service.verify(token)
    expired = app.state.token_service.issue(user_id, expires_delta=timedelta(seconds=-1))
    resp = client.get("/api/images", headers=auth(expired))
    assert resp.status_code == 401
    assert resp.json()["code"] == "auth_expired"


def test_non_bearer_scheme_is_rejected(client):
    token = register(client, "alice")
    resp = client.get("/api/images", headers={"Authorization": f"Basic {token}"})
    assert resp.status_code == 401


def test_token_of_deleted_account_is_rejected(client):
    token = register(client, "alice")
    assert client.delete("/api/auth/account", headers=auth(token)).status_code == 200
    resp = client.get("/api/auth/me", headers=auth(token))
    assert resp.status_code == 401
    assert resp.json()["code"] == "auth_invalid"


def test_error_responses_do_not_leak_internals(client):
    resp = client.get("/api/config", headers=auth("garbage"))
    assert resp.status_code == 401
    assert set(resp.json()) == {"success", "data", "error", "code"}
