import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_successful_signup(client: AsyncClient):
    """Signup creates an account and opens an unverified session

    Given no account exists for the email
    When I sign up with email and password
    Then I receive 201 Created
    And both token cookies are set
    And my session has an incomplete profile
    """
    response = await client.post("/auth/signup", json={
        "email": "player@example.com",
        "password": "SecurePass123!",
    })

    assert response.status_code == 201
    assert response.json() == {"message": "User created successfully"}

    assert "access_token" in client.cookies
    assert "refresh_token" in client.cookies

    set_cookie = " ".join(response.headers.get_list("set-cookie")).lower()
    assert "httponly" in set_cookie
    assert "samesite=lax" in set_cookie
    assert "path=/" in set_cookie

    me = await client.get("/auth/me")
    assert me.status_code == 200
    data = me.json()
    assert data["state"] == {
        "authenticated": True,
        "two_factor_required": False,
        "two_factor_verified": False,
        "profile_complete": False,
    }
    assert data["user"]["status"] == "online"
    assert data["user"]["banner"] == "/img/baner.webp"
    assert "email" not in data["user"]


@pytest.mark.asyncio
async def test_signup_duplicate_email(client: AsyncClient):
    payload = {"email": "player@example.com", "password": "SecurePass123!"}
    await client.post("/auth/signup", json=payload)

    response = await client.post("/auth/signup", json=payload)

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "EMAIL_ALREADY_EXISTS"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"email": "not-an-email", "password": "SecurePass123!"},
    {"email": "player@example.com", "password": "short"},
    {"email": "player@example.com"},
])
async def test_signup_invalid_input(client: AsyncClient, payload):
    response = await client.post("/auth/signup", json=payload)

    assert response.status_code == 422
