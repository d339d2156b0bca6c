"""
cosmosrest Authentication Module.

Master-key request signing for the Cosmos DB REST API.

Author: cosmosrest contributors
"""

from cosmosrest.auth.exceptions import (
    AuthError,
    InvalidMasterKeyError,
    SigningError,
)
from cosmosrest.auth.masterkey import (
    authorization_token,
    build_string_to_sign,
    compute_signature,
    format_http_date,
)

__all__ = [
    # Exceptions
    "AuthError",
    "InvalidMasterKeyError",
    "SigningError",
    # Master key auth
    "authorization_token",
    "build_string_to_sign",
    "compute_signature",
    "format_http_date",
]
