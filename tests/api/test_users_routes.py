import asyncio

import pytest
from fastapi.testclient import TestClient

from gatekeeper.domain.entities import User
from tests.api.conftest import bearer
from tests.fakes import GOOD_PASSWORD


@pytest.fixture()
def logged_in(deps) -> tuple[User, str]:
    user = deps.repo.add(
        User(
            username="alice",
            email="alice@example.com",
            first_name="Alice",
            last_name="L",
            status="active",
        ),
        "hashed-" + GOOD_PASSWORD,
    )
    token = asyncio.run(deps.sessions.create(user.id, user.role))
    return user, token


def test_me_returns_profile(client: TestClient, logged_in):
    user, token = logged_in
    r = client.get("/v1/users/me", headers=bearer(token))

    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["id"] == user.id
    assert data["email"] == "alice@example.com"
    assert data["display_name"] == "Alice L"
    assert data["role"] == "subscriber"
    assert data["status"] == "active"


def test_me_missing_authorization_header(client: TestClient):
    r = client.get("/v1/users/me")
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Authentication required."}


def test_me_invalid_token(client: TestClient):
    r = client.get("/v1/users/me", headers=bearer("nope"))
    assert r.status_code == 401
    assert r.json()["message"] == "Invalid or expired session. Please log in again."


def test_patch_me_updates_names(client: TestClient, deps, logged_in):
    user, token = logged_in
    r = client.patch(
        "/v1/users/me",
        headers=bearer(token),
        json={"first_name": "Ally", "last_name": "Smith"},
    )

    assert r.status_code == 200, r.text
    assert r.json()["data"]["display_name"] == "Ally Smith"
    assert deps.repo.users[user.id].last_name == "Smith"


def test_patch_me_blank_name(client: TestClient, logged_in):
    _, token = logged_in
    r = client.patch(
        "/v1/users/me", headers=bearer(token), json={"first_name": "", "last_name": "X"}
    )
    assert r.status_code == 400
    assert r.json()["message"] == "First name is required."


def test_change_password(client: TestClient, deps, logged_in):
    user, token = logged_in
    r = client.post(
        "/v1/users/me/password",
        headers=bearer(token),
        json={
            "current_password": GOOD_PASSWORD,
            "new_password": "Fresh#456",
            "new_password_confirm": "Fresh#456",
        },
    )

    assert r.status_code == 200, r.text
    assert deps.repo.hashes[user.id] == "hashed-Fresh#456"
    assert deps.mailer.sent[-1].subject == "Password Changed"


def test_change_password_wrong_current(client: TestClient, logged_in):
    _, token = logged_in
    r = client.post(
        "/v1/users/me/password",
        headers=bearer(token),
        json={
            "current_password": "Wrong#000",
            "new_password": "Fresh#456",
            "new_password_confirm": "Fresh#456",
        },
    )
    assert r.status_code == 400
    assert r.json()["message"] == "Current password is incorrect."


def test_me_session_store_outage_uses_envelope(client: TestClient, deps, logged_in):
    _, token = logged_in
    deps.sessions.failing = True

    r = client.get("/v1/users/me", headers=bearer(token))
    assert r.status_code == 503
    assert r.json() == {
        "success": False,
        "message": "Service temporarily unavailable. Please try again later.",
    }
