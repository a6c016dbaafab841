"""
Session API client with single-flight token refresh.
"""

from .refresh_single_flight import ReauthenticationRequired, RefreshSingleFlight
from .session_client import SessionClient

__all__ = [
    "ReauthenticationRequired",
    "RefreshSingleFlight",
    "SessionClient",
]
