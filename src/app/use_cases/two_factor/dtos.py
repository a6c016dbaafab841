"""
Two-Factor Use Case DTOs
"""

from pydantic import BaseModel


class TwoFactorSecretResponse(BaseModel):
    """Freshly generated enrollment secret and its provisioning URI"""

    secret: str
    otpauth_url: str


class TwoFactorStatusResponse(BaseModel):
    """Result of enabling or disabling 2FA"""

    two_factor_enabled: bool
    message: str
