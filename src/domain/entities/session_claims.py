"""
Session Claims and Session State

SessionClaims is what a signed token carries. SessionState is derived per
request from validated claims plus the current user record and is never
persisted or cached.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from .enums import TokenKind
from .user import User


class SessionClaims(BaseModel):
    """Verified payload of an access or refresh token"""

    model_config = ConfigDict(frozen=True)

    subject_id: UUID
    kind: TokenKind
    two_factor_verified: bool
    issued_at: datetime
    expires_at: datetime


class SessionState(BaseModel):
    """Combined state the route access rules are evaluated against"""

    model_config = ConfigDict(frozen=True)

    authenticated: bool
    two_factor_required: bool
    two_factor_verified: bool
    profile_complete: bool

    @classmethod
    def anonymous(cls) -> "SessionState":
        return cls(
            authenticated=False,
            two_factor_required=False,
            two_factor_verified=False,
            profile_complete=False,
        )

    @classmethod
    def resolve(
        cls, claims: Optional[SessionClaims], user: Optional[User]
    ) -> "SessionState":
        """Build the state from validated access claims and the user record"""
        if claims is None or user is None:
            return cls.anonymous()
        return cls(
            authenticated=True,
            two_factor_required=user.two_factor_enabled,
            two_factor_verified=claims.two_factor_verified,
            profile_complete=user.profile_complete,
        )
