"""
Authentication exceptions for cosmosrest.

Author: cosmosrest contributors
"""

from cosmosrest.exceptions import CosmosError


class AuthError(CosmosError):
    """Base exception for request signing errors. Never retried."""

    def __init__(self, message: str, error_code: str = "AuthenticationFailed"):
        super().__init__(message, error_code=error_code)


class InvalidMasterKeyError(AuthError):
    """Raised when the master key is not usable base64 key material."""

    def __init__(self, message: str = "Master key is not valid base64 key material"):
        super().__init__(message, "InvalidMasterKey")


class SigningError(AuthError):
    """Raised when computing the request signature fails."""

    def __init__(self, message: str = "Failed to sign request"):
        super().__init__(message, "SigningFailed")
