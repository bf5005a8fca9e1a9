"""Tests for the /api/admin endpoints and the role guard."""

import pytest
from httpx import AsyncClient
from jose import jwt

from conftest import DEFAULT_PASSWORD, bearer, login, register

CONTACT = {"name": "Jane Doe", "email": "jane@example.com", "phoneNumber": "5551234567"}


@pytest.mark.asyncio
async def test_admin_login_carries_both_roles(admin_tokens: dict):
    assert admin_tokens["roles"] == ["ROLE_USER", "ROLE_ADMIN"]
    claims = jwt.get_unverified_claims(admin_tokens["accessToken"])
    assert claims["roles"] == "ROLE_USER,ROLE_ADMIN"


@pytest.mark.asyncio
async def test_admin_routes_require_token(async_client: AsyncClient):
    """No Authorization header -> 401."""
    resp = await async_client.get("/api/admin/users")
    assert resp.status_code == 401
    body = resp.json()
    assert body["error"] == "Unauthorized"
    assert body["message"].startswith("Unauthorized: ")
    assert resp.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_admin_routes_forbidden_for_users(async_client: AsyncClient, user_tokens: dict):
    """ROLE_USER only -> 403."""
    resp = await async_client.get("/api/admin/users", headers=bearer(user_tokens["accessToken"]))
    assert resp.status_code == 403
    assert resp.json()["message"] == "You don't have permission to access this resource"
    assert resp.json()["error"] == "Forbidden"

    resp = await async_client.get("/api/admin/contacts", headers=bearer(user_tokens["accessToken"]))
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_non_bearer_scheme_is_anonymous(async_client: AsyncClient, admin_tokens: dict):
    resp = await async_client.get(
        "/api/admin/users", headers={"Authorization": f"Token {admin_tokens['accessToken']}"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_list_and_get_users(async_client: AsyncClient, admin_tokens: dict):
    await register(async_client)
    headers = bearer(admin_tokens["accessToken"])

    resp = await async_client.get("/api/admin/users", headers=headers)
    assert resp.status_code == 200
    users = resp.json()
    assert {u["username"] for u in users} == {"rootadmin", "alice2024"}
    assert all("passwordHash" not in u and "password_hash" not in u for u in users)

    alice = next(u for u in users if u["username"] == "alice2024")
    resp = await async_client.get(f"/api/admin/users/{alice['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["email"] == "alice@example.com"
    assert resp.json()["roles"] == ["ROLE_USER"]


@pytest.mark.asyncio
async def test_get_missing_user(async_client: AsyncClient, admin_tokens: dict):
    resp = await async_client.get("/api/admin/users/missing", headers=bearer(admin_tokens["accessToken"]))
    assert resp.status_code == 404
    assert resp.json()["message"] == "User not found with id : 'missing'"
    assert resp.json()["error"] == "Not Found"


@pytest.mark.asyncio
async def test_admin_cannot_edit_self(async_client: AsyncClient, admin_tokens: dict):
    headers = bearer(admin_tokens["accessToken"])
    resp = await async_client.put(
        f"/api/admin/users/{admin_tokens['id']}",
        json={"username": "rootadmin2"},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "You cannot edit your own user account."

    # Checked before the body, so even an empty body is refused the same way
    resp = await async_client.put(f"/api/admin/users/{admin_tokens['id']}", json={}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "You cannot edit your own user account."

    for body in (["x"], "x", 42, None):
        resp = await async_client.put(f"/api/admin/users/{admin_tokens['id']}", json=body, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == "You cannot edit your own user account."


@pytest.mark.asyncio
async def test_update_user_rejects_non_object_body(async_client: AsyncClient, admin_tokens: dict, user_tokens: dict):
    resp = await async_client.put(
        f"/api/admin/users/{user_tokens['id']}",
        json=["alice2025"],
        headers=bearer(admin_tokens["accessToken"]),
    )
    assert resp.status_code == 400
    assert list(resp.json()) == ["body"]


@pytest.mark.asyncio
async def test_update_user(async_client: AsyncClient, admin_tokens: dict, user_tokens: dict):
    headers = bearer(admin_tokens["accessToken"])
    resp = await async_client.put(
        f"/api/admin/users/{user_tokens['id']}",
        json={"username": "alice2025", "email": "alice2025@example.com", "roles": ["ROLE_USER", "ROLE_ADMIN"]},
        headers=headers,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["username"] == "alice2025"
    assert data["email"] == "alice2025@example.com"
    assert data["roles"] == ["ROLE_USER", "ROLE_ADMIN"]

    # Credentials changed: the old refresh token no longer works
    resp = await async_client.post(
        "/api/auth/refresh-token", json={"refreshToken": user_tokens["refreshToken"]}
    )
    assert resp.status_code == 401

    resp = await login(async_client, "alice2025", DEFAULT_PASSWORD)
    assert resp.status_code == 200
    assert resp.json()["roles"] == ["ROLE_USER", "ROLE_ADMIN"]


@pytest.mark.asyncio
async def test_update_user_password(async_client: AsyncClient, admin_tokens: dict, user_tokens: dict):
    headers = bearer(admin_tokens["accessToken"])
    resp = await async_client.put(
        f"/api/admin/users/{user_tokens['id']}",
        json={"username": "alice2024", "password": "NewPassw0rd"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert (await login(async_client, "alice2024", DEFAULT_PASSWORD)).status_code == 401
    assert (await login(async_client, "alice2024", "NewPassw0rd")).status_code == 200


@pytest.mark.asyncio
async def test_update_user_to_taken_username(async_client: AsyncClient, admin_tokens: dict, user_tokens: dict):
    resp = await async_client.put(
        f"/api/admin/users/{user_tokens['id']}",
        json={"username": "rootadmin"},
        headers=bearer(admin_tokens["accessToken"]),
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Username is already in use"


@pytest.mark.asyncio
async def test_update_user_validation(async_client: AsyncClient, admin_tokens: dict, user_tokens: dict):
    resp = await async_client.put(
        f"/api/admin/users/{user_tokens['id']}",
        json={"username": "bad name!", "roles": []},
        headers=bearer(admin_tokens["accessToken"]),
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["username"] == "Username can only contain letters and numbers"
    assert body["roles"] == "A user must keep at least one role"


@pytest.mark.asyncio
async def test_update_missing_user(async_client: AsyncClient, admin_tokens: dict):
    resp = await async_client.put(
        "/api/admin/users/missing",
        json={"username": "someone01"},
        headers=bearer(admin_tokens["accessToken"]),
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_user(async_client: AsyncClient, admin_tokens: dict, user_tokens: dict):
    headers = bearer(admin_tokens["accessToken"])
    resp = await async_client.delete(f"/api/admin/users/{user_tokens['id']}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "User deleted successfully"}

    resp = await async_client.get(f"/api/admin/users/{user_tokens['id']}", headers=headers)
    assert resp.status_code == 404
    resp = await async_client.post(
        "/api/auth/refresh-token", json={"refreshToken": user_tokens["refreshToken"]}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_manages_any_contact(async_client: AsyncClient, admin_tokens: dict, user_tokens: dict):
    created = await async_client.post(
        "/api/kitchensink/contacts", json=CONTACT, headers=bearer(user_tokens["accessToken"])
    )
    assert created.status_code == 200
    contact_id = created.json()["id"]
    headers = bearer(admin_tokens["accessToken"])

    resp = await async_client.get("/api/admin/contacts", headers=headers)
    assert resp.status_code == 200
    assert [c["id"] for c in resp.json()] == [contact_id]

    resp = await async_client.get(f"/api/admin/contacts/{contact_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["createdBy"] == "alice2024"

    resp = await async_client.put(
        f"/api/admin/contacts/{contact_id}",
        json={**CONTACT, "name": "Jane Smith"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Jane Smith"
    assert resp.json()["createdBy"] == "alice2024"

    resp = await async_client.delete(f"/api/admin/contacts/{contact_id}", headers=headers)
    assert resp.status_code == 200
    resp = await async_client.get(f"/api/admin/contacts/{contact_id}", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == f"Contact not found with id : '{contact_id}'"
