"""
Master key authorization for the Cosmos DB REST API.

Implements the ``type=master`` token scheme:

    StringToSign = lower(Verb\\nResourceType\\nResourceLink\\nXMsDate\\nDate\\n)
    Signature    = Base64(HMAC-SHA256(UTF8(StringToSign), Base64Decode(MasterKey)))
    Token        = QueryEscape("type=master&ver=1.0&sig=" + Signature)

Reference: https://docs.microsoft.com/en-us/rest/api/cosmos-db/access-control-on-cosmosdb-resources

Author: cosmosrest contributors
"""

import base64
import binascii
import hashlib
import hmac
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional
from urllib.parse import quote_plus

from cosmosrest.auth.exceptions import InvalidMasterKeyError, SigningError


MASTER_TOKEN = "master"
TOKEN_VERSION = "1.0"


def format_http_date(moment: Optional[datetime] = None) -> str:
    """
    Format a timestamp as an RFC 1123 date in UTC.

    Args:
        moment: Timestamp to format (defaults to now)

    Returns:
        Date string, e.g. ``Fri, 08 Apr 2015 03:52:31 GMT``
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def decode_master_key(master_key: str) -> bytes:
    """
    Decode a base64 master key into HMAC key material.

    Raises:
        InvalidMasterKeyError: If the key is empty or not valid base64
    """
    if not master_key:
        raise InvalidMasterKeyError("Master key is empty")
    try:
        return base64.b64decode(master_key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidMasterKeyError(f"Master key is not valid base64: {e}") from e


def build_string_to_sign(
    method: str,
    resource_type: str,
    resource_link: str,
    date: str,
    secondary_date: str = ""
) -> str:
    """
    Build the canonical string for master key signing.

    The fifth line is reserved for the ``Date`` header, which is left blank
    because ``x-ms-date`` is always sent.

    Args:
        method: HTTP method
        resource_type: Resource type token (dbs, colls, docs, ...)
        resource_link: Canonical resource link
        date: RFC 1123 date sent in ``x-ms-date``
        secondary_date: Value of the ``Date`` header, normally empty

    Returns:
        Lowercased string to sign
    """
    parts = [method, resource_type, resource_link, date, secondary_date]
    return ("\n".join(parts) + "\n").lower()


def compute_signature(string_to_sign: str, master_key: str) -> str:
    """
    Compute HMAC-SHA256 signature.

    Args:
        string_to_sign: Canonical string to sign
        master_key: Base64-encoded master key

    Returns:
        Base64-encoded signature

    Raises:
        InvalidMasterKeyError: If the master key cannot be decoded
        SigningError: If the HMAC computation fails
    """
    key_bytes = decode_master_key(master_key)

    try:
        signature_bytes = hmac.new(
            key_bytes,
            string_to_sign.encode("utf-8"),
            hashlib.sha256
        ).digest()
    except (TypeError, ValueError) as e:
        raise SigningError(f"Failed to compute request signature: {e}") from e

    return base64.b64encode(signature_bytes).decode("utf-8")


def authorization_token(
    master_key: str,
    method: str,
    resource_type: str,
    resource_link: str,
    date: str
) -> str:
    """
    Build the value of the ``Authorization`` header.

    Args:
        master_key: Base64-encoded master key
        method: HTTP method
        resource_type: Resource type token
        resource_link: Canonical resource link
        date: RFC 1123 date sent in ``x-ms-date``

    Returns:
        Query-escaped ``type=master&ver=1.0&sig=...`` token
    """
    string_to_sign = build_string_to_sign(method, resource_type, resource_link, date)
    signature = compute_signature(string_to_sign, master_key)
    token = f"type={MASTER_TOKEN}&ver={TOKEN_VERSION}&sig={signature}"
    return quote_plus(token, safe="")
