"""
Session Core Domain Enums

All enumeration types used across domain entities and access rules.
"""

from enum import Enum


class UserStatus(str, Enum):
    """User presence status"""

    online = "online"
    offline = "offline"
    ingame = "ingame"


class TokenKind(str, Enum):
    """Session token variant, each signed with its own secret"""

    access = "access"
    refresh = "refresh"


class RouteClass(str, Enum):
    """Access policy an endpoint or page requires"""

    public = "public"
    auth_entry = "auth_entry"
    profile_completion = "profile_completion"
    two_factor_challenge = "two_factor_challenge"
    protected = "protected"


class Verdict(str, Enum):
    """Outcome of evaluating a route against a session state"""

    allow = "allow"
    redirect_login = "redirect_login"
    redirect_profile_completion = "redirect_profile_completion"
    redirect_two_factor = "redirect_two_factor"
    redirect_profile = "redirect_profile"
