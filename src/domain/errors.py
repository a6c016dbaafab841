"""
Token and configuration errors.

Use cases report business failures as Result errors; these exceptions are
reserved for the token layer (which behaves like the JWT library it wraps)
and for fatal startup misconfiguration.
"""


class ConfigError(Exception):
    """Signing configuration is missing or invalid. Fatal at startup."""


class TokenError(Exception):
    """Base class for token verification failures"""

    code = "INVALID_TOKEN"
    message = "Invalid token"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)


class ExpiredError(TokenError):
    code = "TOKEN_EXPIRED"
    message = "Token has expired"


class InvalidSignatureError(TokenError):
    code = "INVALID_TOKEN"
    message = "Invalid token"


class MalformedError(TokenError):
    code = "MALFORMED_TOKEN"
    message = "Malformed token"
