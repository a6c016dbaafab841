"""
Token Service

Signs and verifies the two session token kinds. Access and refresh tokens
use distinct secrets and lifetimes, and both carry the 2FA-verified flag of
the session they were minted for. Tokens are never mutated: a refresh mints
a new pair.
"""

from datetime import UTC, datetime, timedelta
from typing import Optional
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ValidationError

from src.domain.entities import SessionClaims, TokenKind
from src.domain.errors import (
    ConfigError,
    ExpiredError,
    InvalidSignatureError,
    MalformedError,
)


class IssuedTokens(BaseModel):
    """Access/refresh pair minted together"""

    access_token: str
    refresh_token: str
    access_ttl_seconds: int
    refresh_ttl_seconds: int


class TokenService:
    """
    Stateless JWT wrapper over one signing secret per token kind.

    Secrets and lifetimes are read once at construction and never change,
    so a single instance is safe to share across concurrent requests.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
    ):
        if not access_secret:
            raise ConfigError("Access token signing secret is not set")
        if not refresh_secret:
            raise ConfigError("Refresh token signing secret is not set")
        if access_ttl.total_seconds() <= 0 or refresh_ttl.total_seconds() <= 0:
            raise ConfigError("Token lifetimes must be positive")

        self._secrets = {
            TokenKind.access: access_secret,
            TokenKind.refresh: refresh_secret,
        }
        self._ttls = {
            TokenKind.access: access_ttl,
            TokenKind.refresh: refresh_ttl,
        }
        self._algorithm = algorithm

    @classmethod
    def from_config(cls, config) -> "TokenService":
        return cls(
            access_secret=config.ACCESS_TOKEN_SECRET,
            refresh_secret=config.REFRESH_TOKEN_SECRET,
            access_ttl=timedelta(minutes=config.ACCESS_TOKEN_TTL_MINUTES),
            refresh_ttl=timedelta(days=config.REFRESH_TOKEN_TTL_DAYS),
            algorithm=config.JWT_ALGORITHM,
        )

    @property
    def access_ttl_seconds(self) -> int:
        return int(self._ttls[TokenKind.access].total_seconds())

    @property
    def refresh_ttl_seconds(self) -> int:
        return int(self._ttls[TokenKind.refresh].total_seconds())

    def issue(
        self,
        subject_id: UUID,
        two_factor_verified: bool,
        now: Optional[datetime] = None,
    ) -> IssuedTokens:
        """
        Mint an access/refresh pair carrying the same 2FA-verified flag.

        Args:
            subject_id: User UUID
            two_factor_verified: Whether the session passed the 2FA challenge
            now: Issue time (defaults to current UTC time)

        Returns:
            IssuedTokens with both tokens and their lifetimes in seconds
        """
        now = now or datetime.now(UTC)
        return IssuedTokens(
            access_token=self._sign(TokenKind.access, subject_id, two_factor_verified, now),
            refresh_token=self._sign(TokenKind.refresh, subject_id, two_factor_verified, now),
            access_ttl_seconds=self.access_ttl_seconds,
            refresh_ttl_seconds=self.refresh_ttl_seconds,
        )

    def verify(self, token: str, kind: TokenKind) -> SessionClaims:
        """
        Verify a token of the given kind and return its claims.

        Raises:
            MalformedError: token is not a structurally valid session token
            InvalidSignatureError: signature does not match this kind's secret
            ExpiredError: token is past its expiry
        """
        if not token:
            raise MalformedError("Token is empty")

        try:
            jwt.get_unverified_claims(token)
        except JWTError:
            raise MalformedError()

        try:
            payload = jwt.decode(
                token,
                self._secrets[kind],
                algorithms=[self._algorithm],
                options={"require_exp": True, "require_iat": True, "require_sub": True},
            )
        except ExpiredSignatureError:
            raise ExpiredError()
        except JWTError:
            raise InvalidSignatureError()

        if payload.get("type") != kind.value:
            raise InvalidSignatureError(f"Not a {kind.value} token")

        try:
            return SessionClaims(
                subject_id=UUID(payload["sub"]),
                kind=kind,
                two_factor_verified=payload["two_factor_verified"],
                issued_at=datetime.fromtimestamp(payload["iat"], UTC),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (KeyError, TypeError, ValueError, ValidationError):
            raise MalformedError()

    def _sign(
        self,
        kind: TokenKind,
        subject_id: UUID,
        two_factor_verified: bool,
        now: datetime,
    ) -> str:
        payload = {
            "sub": str(subject_id),
            "type": kind.value,
            "two_factor_verified": two_factor_verified,
            "iat": now,
            "exp": now + self._ttls[kind],
        }
        return jwt.encode(payload, self._secrets[kind], algorithm=self._algorithm)
