"""
Session Core Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import (
    UserStatus,
    TokenKind,
    RouteClass,
    Verdict,
)

# Export all entities
from .user import User, DEFAULT_BANNER
from .session_claims import SessionClaims, SessionState

__all__ = [
    # Enums
    "UserStatus",
    "TokenKind",
    "RouteClass",
    "Verdict",
    # Entities
    "User",
    "DEFAULT_BANNER",
    "SessionClaims",
    "SessionState",
]
