"""
Use Cases

Organized into domain folders:
- auth/: Session lifecycle (signup, login, refresh, logout, 2FA elevation)
- two_factor/: TOTP enrollment and code checks
- users/: Profile management

Import from subdirectories for better organization.
"""

from .auth import SessionCoordinator
from .two_factor import TotpEnrollment
from .users import CompleteProfileUseCase

__all__ = [
    "SessionCoordinator",
    "TotpEnrollment",
    "CompleteProfileUseCase",
]
