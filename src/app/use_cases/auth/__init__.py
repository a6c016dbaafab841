"""
Authentication Use Cases

All session lifecycle business logic.
"""

from .session_coordinator import SessionCoordinator
from .dtos import (
    AccessDecision,
    LoginResponse,
    LogoutResponse,
    SessionResponse,
)

__all__ = [
    # Use Cases
    "SessionCoordinator",
    # DTOs - Responses
    "AccessDecision",
    "LoginResponse",
    "LogoutResponse",
    "SessionResponse",
]
