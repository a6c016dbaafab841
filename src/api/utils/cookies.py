from fastapi import Response

from src.app.services.token_service import IssuedTokens

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"


def set_auth_cookies(response: Response, tokens: IssuedTokens, secure: bool = False) -> None:
    """
    Attach both session tokens as http-only, same-site=lax cookies on "/"

    Each cookie lives exactly as long as the token it carries.
    """
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=tokens.access_ttl_seconds,
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=tokens.refresh_ttl_seconds,
        httponly=True,
        secure=secure,
        samesite="lax",
        path="/",
    )


def clear_auth_cookies(response: Response, secure: bool = False) -> None:
    response.delete_cookie(
        ACCESS_TOKEN_COOKIE, path="/", httponly=True, secure=secure, samesite="lax"
    )
    response.delete_cookie(
        REFRESH_TOKEN_COOKIE, path="/", httponly=True, secure=secure, samesite="lax"
    )
