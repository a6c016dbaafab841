import pyotp
import pytest
from httpx import AsyncClient
from sqlmodel import select

from src.domain.entities import User


@pytest.mark.asyncio
async def test_refresh_issues_new_cookies(signed_up: AsyncClient):
    """Refresh mints a new token pair from the refresh cookie"""
    signed_up.cookies.delete("access_token")

    response = await signed_up.post("/auth/refresh")

    assert response.status_code == 200
    assert "access_token" in signed_up.cookies
    assert (await signed_up.get("/auth/me")).status_code == 200


@pytest.mark.asyncio
async def test_refresh_without_cookie(client: AsyncClient):
    response = await client.post("/auth/refresh")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "MISSING_TOKEN"


@pytest.mark.asyncio
async def test_refresh_with_access_token_is_rejected(signed_up: AsyncClient):
    access = signed_up.cookies["access_token"]
    signed_up.cookies.clear()
    signed_up.cookies.set("refresh_token", access)

    response = await signed_up.post("/auth/refresh")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


@pytest.mark.asyncio
async def test_refresh_with_garbage(client: AsyncClient):
    client.cookies.set("refresh_token", "garbage")

    response = await client.post("/auth/refresh")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "MALFORMED_TOKEN"


@pytest.mark.asyncio
async def test_refresh_for_deleted_user_clears_cookies(signed_up: AsyncClient, db_session):
    user = (await db_session.exec(select(User))).one()
    await db_session.delete(user)
    await db_session.commit()

    response = await signed_up.post("/auth/refresh")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "USER_NOT_FOUND"
    assert "access_token" not in signed_up.cookies
    assert "refresh_token" not in signed_up.cookies


@pytest.mark.asyncio
async def test_refresh_keeps_unverified_session_unverified(
    completed: AsyncClient, two_factor_secret: str
):
    completed.cookies.clear()
    signin = await completed.post("/auth/signin", json={
        "email": "player@example.com",
        "password": "SecurePass123!",
    })
    assert signin.json()["requires_2fa"] is True

    response = await completed.post("/auth/refresh")
    assert response.status_code == 200

    me = await completed.get("/auth/me")
    assert me.json()["state"]["two_factor_required"] is True
    assert me.json()["state"]["two_factor_verified"] is False

    gated = await completed.get("/auth/access", params={"path": "/game"})
    assert gated.json()["verdict"] == "redirect_two_factor"


@pytest.mark.asyncio
async def test_refresh_keeps_verified_session_verified(
    completed: AsyncClient, two_factor_secret: str
):
    verify = await completed.post(
        "/auth/2fa/verify", json={"code": pyotp.TOTP(two_factor_secret).now()}
    )
    assert verify.status_code == 200

    response = await completed.post("/auth/refresh")
    assert response.status_code == 200

    me = await completed.get("/auth/me")
    assert me.json()["state"]["two_factor_verified"] is True
