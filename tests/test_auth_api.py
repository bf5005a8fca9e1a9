"""Tests for the /api/auth endpoints."""

import pytest
from httpx import AsyncClient
from jose import jwt

from conftest import bearer, login, register

ALICE = {"username": "alice001", "email": "a@ex.com", "password": "Passw0rd!"}


async def _register_alice(client: AsyncClient):
    resp = await client.post("/api/auth/register", json=ALICE)
    assert resp.status_code == 200
    return resp


@pytest.mark.asyncio
async def test_register(async_client: AsyncClient):
    """POST /auth/register should create a ROLE_USER account."""
    resp = await _register_alice(async_client)
    assert resp.json() == {"message": "User registered successfully"}


@pytest.mark.asyncio
async def test_happy_path_login(async_client: AsyncClient):
    await _register_alice(async_client)
    resp = await login(async_client, "alice001", "Passw0rd!")
    assert resp.status_code == 200
    data = resp.json()
    assert data["accessToken"]
    assert data["refreshToken"]
    assert data["type"] == "Bearer"
    assert data["username"] == "alice001"
    assert data["roles"] == ["ROLE_USER"]
    assert data["id"]


@pytest.mark.asyncio
async def test_access_token_shape(async_client: AsyncClient):
    await _register_alice(async_client)
    token = (await login(async_client, "alice001", "Passw0rd!")).json()["accessToken"]
    assert jwt.get_unverified_header(token)["alg"] == "HS256"
    claims = jwt.get_unverified_claims(token)
    assert claims["sub"] == "alice001"
    assert claims["roles"] == "ROLE_USER"
    # iat is floored, exp rounded up
    assert 15 * 60 <= claims["exp"] - claims["iat"] <= 15 * 60 + 1


@pytest.mark.asyncio
async def test_wrong_password(async_client: AsyncClient):
    await _register_alice(async_client)
    resp = await login(async_client, "alice001", "wrong")
    assert resp.status_code == 401
    body = resp.json()
    assert body["message"] == "Invalid username or password"
    assert body["status"] == 401
    assert body["error"] == "Unauthorized"
    assert body["path"] == "/api/auth/login"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_unknown_user_same_answer_as_wrong_password(async_client: AsyncClient):
    resp = await login(async_client, "nobody01", "Passw0rd!")
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid username or password"


@pytest.mark.asyncio
async def test_refresh(async_client: AsyncClient):
    await _register_alice(async_client)
    rt = (await login(async_client, "alice001", "Passw0rd!")).json()["refreshToken"]

    resp = await async_client.post("/api/auth/refresh-token", json={"refreshToken": rt})
    assert resp.status_code == 200
    data = resp.json()
    assert jwt.get_unverified_claims(data["accessToken"])["sub"] == "alice001"
    assert data["refreshToken"] == rt
    assert data["username"] == "alice001"


@pytest.mark.asyncio
async def test_second_login_revokes_first_refresh(async_client: AsyncClient):
    await _register_alice(async_client)
    rt1 = (await login(async_client, "alice001", "Passw0rd!")).json()["refreshToken"]
    second = await login(async_client, "alice001", "Passw0rd!")
    assert second.status_code == 200
    rt2 = second.json()["refreshToken"]
    assert rt2 != rt1

    resp = await async_client.post("/api/auth/refresh-token", json={"refreshToken": rt1})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid or expired refresh token"

    resp = await async_client.post("/api/auth/refresh-token", json={"refreshToken": rt2})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_unknown_refresh_token(async_client: AsyncClient):
    resp = await async_client.post("/api/auth/refresh-token", json={"refreshToken": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid or expired refresh token"


@pytest.mark.asyncio
async def test_logout_revokes_refresh_token(async_client: AsyncClient):
    await _register_alice(async_client)
    rt = (await login(async_client, "alice001", "Passw0rd!")).json()["refreshToken"]

    resp = await async_client.post("/api/auth/logout", json={"refreshToken": rt})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out successfully."}

    resp = await async_client.post("/api/auth/refresh-token", json={"refreshToken": rt})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_logout_without_token_is_a_noop(async_client: AsyncClient):
    resp = await async_client.post("/api/auth/logout", json={})
    assert resp.status_code == 200
    assert resp.json() == {"message": "Logout request processed."}

    resp = await async_client.post("/api/auth/logout")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_register_duplicate_username(async_client: AsyncClient):
    await _register_alice(async_client)
    resp = await register(async_client, "alice001", "b@ex.com", "Passw0rd!")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Username is already taken"
    assert resp.json()["error"] == "Bad Request"


@pytest.mark.asyncio
async def test_register_duplicate_email(async_client: AsyncClient):
    await _register_alice(async_client)
    resp = await register(async_client, "alice002", "a@ex.com", "Passw0rd!")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email is already in use"


@pytest.mark.asyncio
async def test_register_validation_returns_field_map(async_client: AsyncClient):
    """Invalid bodies answer 400 with one message per offending field."""
    resp = await register(async_client, "short", "not-an-email", "pw")
    assert resp.status_code == 400
    body = resp.json()
    assert set(body) == {"username", "email", "password"}
    assert body["username"] == "Username must be between 8 and 30 characters"
    assert body["password"] == "Password must be between 8 and 120 characters"


@pytest.mark.asyncio
async def test_login_blank_fields(async_client: AsyncClient):
    resp = await async_client.post("/api/auth/login", json={"username": " ", "password": ""})
    assert resp.status_code == 400
    assert resp.json() == {
        "username": "Username cannot be blank",
        "password": "Password cannot be blank",
    }


@pytest.mark.asyncio
async def test_invalid_bearer_rejected_on_public_route(async_client: AsyncClient):
    """A bad bearer token is refused even on public routes."""
    resp = await async_client.post(
        "/api/auth/login",
        json={"username": "alice001", "password": "Passw0rd!"},
        headers=bearer("garbage"),
    )
    assert resp.status_code == 401
    assert resp.json()["message"] == "Unauthorized: Invalid access token"
