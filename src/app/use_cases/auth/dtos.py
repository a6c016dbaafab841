"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the session domain.
Provides type safety and clear contracts between layers.
"""

from typing import Optional

from pydantic import BaseModel

from src.app.services.token_service import IssuedTokens
from src.domain.entities import RouteClass, SessionState, Verdict


# ============================================================================
# Response DTOs
# ============================================================================


class LoginResponse(BaseModel):
    """Tokens issued at login plus whether a 2FA step must follow"""

    tokens: IssuedTokens
    requires_2fa: bool


class LogoutResponse(BaseModel):
    """Response for logout"""

    message: str


class SessionResponse(BaseModel):
    """Resolved session state with the public profile behind it"""

    state: SessionState
    user: Optional[dict] = None


class AccessDecision(BaseModel):
    """Verdict for one path, with tokens when the check had to refresh"""

    path: str
    route_class: RouteClass
    verdict: Verdict
    location: Optional[str] = None
    state: SessionState
    refreshed_tokens: Optional[IssuedTokens] = None
    session_invalidated: bool = False
