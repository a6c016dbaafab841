"""
Two-Factor Use Cases

TOTP enrollment, verification and removal.
"""

from .totp_enrollment import TotpEnrollment
from .dtos import TwoFactorSecretResponse, TwoFactorStatusResponse

__all__ = [
    "TotpEnrollment",
    "TwoFactorSecretResponse",
    "TwoFactorStatusResponse",
]
