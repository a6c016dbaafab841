"""
Session Coordinator

Single entry point request handlers use for the session lifecycle:
signup, login, refresh, logout, 2FA elevation and per-request state
resolution.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError

from src.libs.result import Error, Result, Return
from src.app.services.password_hasher import IPasswordHasher
from src.app.services.token_service import IssuedTokens, TokenService
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.two_factor import TotpEnrollment
from src.domain.entities import (
    SessionClaims,
    SessionState,
    TokenKind,
    User,
    UserStatus,
)
from src.domain.errors import TokenError
from src.domain.route_access import RoutePolicy, evaluate
from .dtos import AccessDecision, LoginResponse, LogoutResponse, SessionResponse

logger = logging.getLogger(__name__)


class SessionCoordinator:
    """
    Use case for the session lifecycle.

    Business Rules:
    - Unknown email and wrong password fail identically (INVALID_CREDENTIALS)
    - Login and signup always issue tokens with two_factor_verified=False;
      the session is elevated only through verify_two_factor()
    - Refresh re-issues both tokens verified only when the user still has
      2FA enabled and the refresh token was verified
    - A refresh for a deleted user fails with USER_NOT_FOUND
    - Logout marks the user offline; tokens are stateless and discarded by
      the client
    """

    def __init__(
        self,
        uow: UnitOfWork,
        tokens: TokenService,
        hasher: IPasswordHasher,
        totp: TotpEnrollment,
    ):
        self.uow = uow
        self.tokens = tokens
        self.hasher = hasher
        self.totp = totp

    async def login(self, email: str, password: str) -> Result[LoginResponse]:
        """
        Authenticate with email and password.

        Args:
            email: User email
            password: Plain text password

        Returns:
            Result with LoginResponse (unverified tokens + requires_2fa), or Error
        """
        async with self.uow:
            user = await self.uow.users.get_by_email(email)

            # Always perform a hash check so timing does not reveal accounts
            if user is None:
                self.hasher.burn()
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid email or password")
                )

            if not self.hasher.verify(password, user.password_hash):
                return Return.err(
                    Error("INVALID_CREDENTIALS", "Invalid email or password")
                )

            await self.uow.users.update_status(user.id, UserStatus.online)
            await self.uow.commit()

            logger.info(f"User {user.id} logged in")

            return Return.ok(
                LoginResponse(
                    tokens=self.tokens.issue(user.id, two_factor_verified=False),
                    requires_2fa=user.two_factor_enabled,
                )
            )

    async def sign_up(self, email: str, password: str) -> Result[IssuedTokens]:
        """
        Register a new account and open an unverified session for it.

        Returns:
            Result with IssuedTokens, or Error(EMAIL_ALREADY_EXISTS)
        """
        async with self.uow:
            existing_user = await self.uow.users.get_by_email(email)
            if existing_user:
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "User with this email already exists")
                )

            user = User(
                email=email,
                password_hash=self.hasher.hash(password),
                status=UserStatus.online,
                profile_complete=False,
            )
            try:
                user = await self.uow.users.create(user)
                await self.uow.commit()
            except IntegrityError:
                # Lost a race with a concurrent signup for the same email
                return Return.err(
                    Error("EMAIL_ALREADY_EXISTS", "User with this email already exists")
                )

            logger.info(f"User {user.id} signed up")

            return Return.ok(self.tokens.issue(user.id, two_factor_verified=False))

    async def refresh(self, claims: SessionClaims) -> Result[IssuedTokens]:
        """
        Mint a new token pair from verified refresh-token claims.

        The new pair is verified only if the user still has 2FA enabled and
        the refresh token was already verified; a refresh never elevates.

        Returns:
            Result with IssuedTokens, or Error(USER_NOT_FOUND)
        """
        async with self.uow:
            user = await self.uow.users.get_by_id(claims.subject_id)
            if user is None:
                logger.warning(f"Refresh for missing user {claims.subject_id}")
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            verified = user.two_factor_enabled and claims.two_factor_verified
            return Return.ok(self.tokens.issue(user.id, two_factor_verified=verified))

    async def logout(self, subject_id: UUID) -> Result[LogoutResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(subject_id)
            if user is not None:
                await self.uow.users.update_status(user.id, UserStatus.offline)
                await self.uow.commit()
                logger.info(f"User {user.id} logged out")

            return Return.ok(LogoutResponse(message="Logged out successfully"))

    async def verify_two_factor(self, subject_id: UUID, code: str) -> Result[IssuedTokens]:
        """
        Elevate the session after a valid 2FA code.

        Returns:
            Result with IssuedTokens carrying two_factor_verified=True, or the
            TotpEnrollment.verify error
        """
        result = await self.totp.verify(subject_id, code)
        if result.is_err():
            logger.warning(f"2FA verification failed for user {subject_id}: {result.error.code}")
            return Return.err(result.error)

        logger.info(f"User {subject_id} passed 2FA")
        return Return.ok(self.tokens.issue(subject_id, two_factor_verified=True))

    async def load_session(self, claims: SessionClaims) -> Result[SessionResponse]:
        """Resolve session state and profile for verified access claims"""
        async with self.uow:
            user = await self.uow.users.get_by_id(claims.subject_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            return Return.ok(
                SessionResponse(
                    state=SessionState.resolve(claims, user),
                    user=user.public_profile(),
                )
            )

    async def resolve_session_state(self, access_token: Optional[str]) -> Result[SessionState]:
        """Session state for a raw access token; anonymous when it does not verify"""
        claims = self._verify_or_none(access_token, TokenKind.access)
        if claims is None:
            return Return.ok(SessionState.anonymous())

        async with self.uow:
            user = await self.uow.users.get_by_id(claims.subject_id)
            return Return.ok(SessionState.resolve(claims, user))

    async def evaluate_access(
        self,
        path: str,
        access_token: Optional[str],
        refresh_token: Optional[str],
        policy: RoutePolicy,
    ) -> Result[AccessDecision]:
        """
        Decide whether a path may be served for the caller's cookies.

        When the access token is missing or no longer verifies but a refresh
        token is present, the session is refreshed first and the decision is
        made against the new access token. If the refresh subject no longer
        exists the decision is flagged session_invalidated.
        """
        refreshed: Optional[IssuedTokens] = None
        session_invalidated = False

        if self._verify_or_none(access_token, TokenKind.access) is None and refresh_token:
            refresh_claims = self._verify_or_none(refresh_token, TokenKind.refresh)
            if refresh_claims is not None:
                result = await self.refresh(refresh_claims)
                if result.is_ok():
                    refreshed = result.value
                    access_token = refreshed.access_token
                elif result.error.code == "USER_NOT_FOUND":
                    session_invalidated = True
                    access_token = None

        state_result = await self.resolve_session_state(access_token)
        state = state_result.value

        route_class = policy.classify(path)
        verdict = evaluate(route_class, state)

        return Return.ok(
            AccessDecision(
                path=path,
                route_class=route_class,
                verdict=verdict,
                location=policy.location(verdict, path),
                state=state,
                refreshed_tokens=refreshed,
                session_invalidated=session_invalidated,
            )
        )

    def _verify_or_none(self, token: Optional[str], kind: TokenKind) -> Optional[SessionClaims]:
        if not token:
            return None
        try:
            return self.tokens.verify(token, kind)
        except TokenError as exc:
            logger.debug(f"{kind.value} token rejected: {exc.code}")
            return None
