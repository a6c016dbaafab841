from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field

from src.api.error import ClientError, ServerError
from src.api.utils.cookies import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    clear_auth_cookies,
    set_auth_cookies,
)
from src.app.use_cases.auth import (
    AccessDecision,
    LogoutResponse,
    SessionCoordinator,
    SessionResponse,
)
from src.depends import (
    get_current_claims,
    get_refresh_claims,
    get_route_policy,
    get_session_coordinator,
)
from src.domain.entities import SessionClaims
from src.domain.route_access import RoutePolicy

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _cookie_secure(request: Request) -> bool:
    return bool(request.app.state.config.COOKIE_SECURE)


class SignupRequest(BaseModel):
    """
    Signup HTTP request payload

    Validates incoming credentials before they reach the coordinator.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(
        ..., min_length=8, max_length=255, description="User password (min 8 chars)"
    )


class LoginRequest(BaseModel):
    """Login HTTP request payload"""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., max_length=255, description="User password")


class MessageResponse(BaseModel):
    message: str


class SigninResponse(BaseModel):
    requires_2fa: bool
    message: str


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=MessageResponse)
async def signup(
    body: SignupRequest,
    request: Request,
    response: Response,
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
):
    """
    User Signup

    Creates an account with an incomplete profile and opens an unverified
    session. Tokens are returned as cookies.

    Raises:
        - 409 Conflict: Email already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
        - 500 Internal Server Error: Server error
    """
    result = await coordinator.sign_up(body.email, body.password)

    if result.is_err():
        error = result.error
        if error.code == "EMAIL_ALREADY_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    set_auth_cookies(response, result.value, secure=_cookie_secure(request))
    return MessageResponse(message="User created successfully")


@router.post("/signin", status_code=status.HTTP_200_OK, response_model=SigninResponse)
async def signin(
    body: LoginRequest,
    request: Request,
    response: Response,
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
):
    """
    User Login

    Issues an unverified session. When requires_2fa is true the client must
    call /auth/2fa/verify before protected routes are served.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 500 Internal Server Error: Server error
    """
    result = await coordinator.login(body.email, body.password)

    if result.is_err():
        error = result.error
        if error.code == "INVALID_CREDENTIALS":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    login = result.value
    set_auth_cookies(response, login.tokens, secure=_cookie_secure(request))
    return SigninResponse(
        requires_2fa=login.requires_2fa,
        message="Please verify 2FA code" if login.requires_2fa else "Login successful",
    )


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=MessageResponse)
async def refresh(
    request: Request,
    response: Response,
    claims: SessionClaims = Depends(get_refresh_claims),
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
):
    """
    Refresh Session Tokens

    Mints a new access/refresh pair from the refresh_token cookie.

    Raises:
        - 401 Unauthorized: Missing/invalid/expired refresh token, or the
          user no longer exists (cookies are cleared)
        - 500 Internal Server Error: Server error
    """
    result = await coordinator.refresh(claims)

    if result.is_err():
        error = result.error
        if error.code == "USER_NOT_FOUND":
            # Session is dead: reject and drop both cookies in the same response
            rejected = JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"error": {"code": error.code, "message": error.message}},
            )
            clear_auth_cookies(rejected, secure=_cookie_secure(request))
            return rejected
        raise ServerError(error)

    set_auth_cookies(response, result.value, secure=_cookie_secure(request))
    return MessageResponse(message="Tokens refreshed successfully")


@router.delete("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    request: Request,
    response: Response,
    claims: SessionClaims = Depends(get_current_claims),
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
):
    """
    Logout

    Marks the user offline and clears both token cookies.
    """
    result = await coordinator.logout(claims.subject_id)

    if result.is_err():
        raise ServerError(result.error)

    clear_auth_cookies(response, secure=_cookie_secure(request))
    return result.value


@router.get("/me", status_code=status.HTTP_200_OK, response_model=SessionResponse)
async def get_me(
    claims: SessionClaims = Depends(get_current_claims),
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
):
    """
    Current Session

    Returns the resolved session state and the public profile.

    Raises:
        - 401 Unauthorized: Invalid or expired access token, or user deleted
    """
    result = await coordinator.load_session(claims)

    if result.is_err():
        error = result.error
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value


@router.get(
    "/access",
    status_code=status.HTTP_200_OK,
    response_model=AccessDecision,
    response_model_exclude={"refreshed_tokens"},
)
async def check_access(
    request: Request,
    response: Response,
    path: str = Query(..., description="Requested page path"),
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
    policy: RoutePolicy = Depends(get_route_policy),
):
    """
    Edge Access Check

    Evaluated by the reverse proxy for every page request. When only the
    refresh cookie is present, the session is refreshed first and the new
    cookies are returned alongside the verdict. Cookies are cleared when
    the refresh subject no longer exists.
    """
    result = await coordinator.evaluate_access(
        path,
        access_token=request.cookies.get(ACCESS_TOKEN_COOKIE),
        refresh_token=request.cookies.get(REFRESH_TOKEN_COOKIE),
        policy=policy,
    )

    if result.is_err():
        raise ServerError(result.error)

    decision = result.value
    if decision.refreshed_tokens is not None:
        set_auth_cookies(response, decision.refreshed_tokens, secure=_cookie_secure(request))
    elif decision.session_invalidated:
        clear_auth_cookies(response, secure=_cookie_secure(request))
    return decision
