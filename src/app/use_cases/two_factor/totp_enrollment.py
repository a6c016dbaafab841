"""
TOTP Enrollment

Time-based one-time codes (RFC 6238) layered on top of password login.

Secret lifecycle on the user record:
    absent -> generated (not enabled) -> enabled -> disabled (absent again)
"""

import logging
from uuid import UUID

import pyotp

from src.libs.result import Error, Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.domain.entities import User
from .dtos import TwoFactorSecretResponse, TwoFactorStatusResponse

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


class TotpEnrollment:
    """
    Use case for 2FA enrollment and code checks.

    Business Rules:
    - Codes use the 30-second step with +/- valid_window steps of skew
    - A new secret can only replace one that was never enabled
    - Enable requires a generated secret and a valid code
    - Verify and Disable require 2FA to be enabled
    - Disable clears secret and flag in one update
    - Failed checks never mutate state
    """

    def __init__(self, uow: UnitOfWork, issuer: str = "pong", valid_window: int = 1):
        self.uow = uow
        self.issuer = issuer
        self.valid_window = valid_window

    async def generate_secret(self, user_id: UUID) -> Result[TwoFactorSecretResponse]:
        """
        Generate and store a fresh secret for the user.

        Returns:
            Result with the secret and an otpauth:// provisioning URI, or Error
        """
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.two_factor_enabled:
                return Return.err(
                    Error("TWO_FACTOR_ALREADY_ENABLED", "2FA is already enabled")
                )

            secret = pyotp.random_base32()
            await self.uow.users.set_two_factor_secret(user.id, secret)
            await self.uow.commit()

            otpauth_url = pyotp.TOTP(secret).provisioning_uri(
                name=user.email, issuer_name=self.issuer
            )
            logger.info(f"2FA secret generated for user {user.id}")

            return Return.ok(
                TwoFactorSecretResponse(secret=secret, otpauth_url=otpauth_url)
            )

    async def enable(self, user_id: UUID, code: str) -> Result[TwoFactorStatusResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.two_factor_enabled:
                return Return.err(
                    Error("TWO_FACTOR_ALREADY_ENABLED", "2FA is already enabled")
                )

            if not user.has_two_factor_secret:
                return Return.err(
                    Error("TWO_FACTOR_NOT_ENROLLED", "2FA secret not generated")
                )

            if not self.check_code(user.two_factor_secret, code):
                return Return.err(Error("INVALID_TWO_FACTOR_CODE", "Invalid 2FA code"))

            await self.uow.users.turn_on_two_factor(user.id)
            await self.uow.commit()
            logger.info(f"2FA enabled for user {user.id}")

            return Return.ok(
                TwoFactorStatusResponse(
                    two_factor_enabled=True, message="2FA enabled successfully"
                )
            )

    async def verify(self, user_id: UUID, code: str) -> Result[None]:
        """Check a code against an enabled secret. No state is changed."""
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            error = self._require_valid_code(user, code)
            if error:
                return Return.err(error)
            return Return.ok(None)

    async def disable(self, user_id: UUID, code: str) -> Result[TwoFactorStatusResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(user_id)
            error = self._require_valid_code(user, code)
            if error:
                return Return.err(error)

            await self.uow.users.turn_off_two_factor(user.id)
            await self.uow.commit()
            logger.info(f"2FA disabled for user {user.id}")

            return Return.ok(
                TwoFactorStatusResponse(
                    two_factor_enabled=False, message="2FA disabled successfully"
                )
            )

    def check_code(self, secret: str, code: str) -> bool:
        if not secret or not code:
            return False
        code = code.strip()
        if len(code) != CODE_LENGTH or not code.isdigit():
            return False
        return pyotp.TOTP(secret).verify(code, valid_window=self.valid_window)

    def _require_valid_code(self, user: User, code: str):
        if user is None:
            return Error("USER_NOT_FOUND", "User not found")
        if not user.two_factor_enabled:
            return Error("TWO_FACTOR_NOT_ENABLED", "2FA is not enabled for this user")
        if not self.check_code(user.two_factor_secret, code):
            return Error("INVALID_TWO_FACTOR_CODE", "Invalid 2FA code")
        return None
