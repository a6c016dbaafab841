from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.api.utils.cookies import set_auth_cookies
from src.app.use_cases.auth import SessionCoordinator
from src.app.use_cases.two_factor import (
    TotpEnrollment,
    TwoFactorSecretResponse,
    TwoFactorStatusResponse,
)
from src.depends import get_current_claims, get_session_coordinator, get_totp_enrollment
from src.domain.entities import SessionClaims

router = APIRouter(prefix="/auth/2fa", tags=["Two-Factor"])


class TwoFactorCodeRequest(BaseModel):
    """6-digit code from the authenticator app"""

    code: str = Field(..., min_length=6, max_length=6, description="TOTP code")


class VerifyResponse(BaseModel):
    message: str


def _raise_for(error, invalid_code_status: int):
    if error.code in ("TWO_FACTOR_NOT_ENROLLED", "TWO_FACTOR_NOT_ENABLED"):
        raise ClientError(error, status_code=status.HTTP_400_BAD_REQUEST)
    if error.code == "TWO_FACTOR_ALREADY_ENABLED":
        raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
    if error.code == "INVALID_TWO_FACTOR_CODE":
        raise ClientError(error, status_code=invalid_code_status)
    if error.code == "USER_NOT_FOUND":
        raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
    raise ServerError(error)


@router.get("/generate", status_code=status.HTTP_200_OK, response_model=TwoFactorSecretResponse)
async def generate(
    claims: SessionClaims = Depends(get_current_claims),
    totp: TotpEnrollment = Depends(get_totp_enrollment),
):
    """
    Start 2FA Enrollment

    Generates a new secret and an otpauth:// URI to render as a QR code.
    Replaces any earlier secret that was never enabled.

    Raises:
        - 409 Conflict: 2FA already enabled
    """
    result = await totp.generate_secret(claims.subject_id)
    if result.is_err():
        _raise_for(result.error, status.HTTP_400_BAD_REQUEST)
    return result.value


@router.post("/enable", status_code=status.HTTP_200_OK, response_model=TwoFactorStatusResponse)
async def enable(
    body: TwoFactorCodeRequest,
    claims: SessionClaims = Depends(get_current_claims),
    totp: TotpEnrollment = Depends(get_totp_enrollment),
):
    """
    Enable 2FA

    Confirms the generated secret with a first valid code.

    Raises:
        - 400 Bad Request: No secret generated, or invalid code
        - 409 Conflict: 2FA already enabled
    """
    result = await totp.enable(claims.subject_id, body.code)
    if result.is_err():
        _raise_for(result.error, status.HTTP_400_BAD_REQUEST)
    return result.value


@router.post("/verify", status_code=status.HTTP_200_OK, response_model=VerifyResponse)
async def verify(
    body: TwoFactorCodeRequest,
    request: Request,
    response: Response,
    claims: SessionClaims = Depends(get_current_claims),
    coordinator: SessionCoordinator = Depends(get_session_coordinator),
):
    """
    Verify 2FA for the current session

    On success both cookies are replaced with tokens carrying
    two_factor_verified=true.

    Raises:
        - 400 Bad Request: 2FA not enabled
        - 401 Unauthorized: Invalid code
    """
    result = await coordinator.verify_two_factor(claims.subject_id, body.code)
    if result.is_err():
        _raise_for(result.error, status.HTTP_401_UNAUTHORIZED)

    set_auth_cookies(
        response, result.value, secure=bool(request.app.state.config.COOKIE_SECURE)
    )
    return VerifyResponse(message="2FA verification successful")


@router.post("/disable", status_code=status.HTTP_200_OK, response_model=TwoFactorStatusResponse)
async def disable(
    body: TwoFactorCodeRequest,
    claims: SessionClaims = Depends(get_current_claims),
    totp: TotpEnrollment = Depends(get_totp_enrollment),
):
    """
    Disable 2FA

    Requires a valid code; clears the secret and the flag together.

    Raises:
        - 400 Bad Request: 2FA not enabled
        - 401 Unauthorized: Invalid code
    """
    result = await totp.disable(claims.subject_id, body.code)
    if result.is_err():
        _raise_for(result.error, status.HTTP_401_UNAUTHORIZED)
    return result.value
