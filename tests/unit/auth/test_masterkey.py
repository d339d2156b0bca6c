"""Tests for master key request signing."""

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from urllib.parse import unquote_plus

import pytest

from cosmosrest.auth import (
    AuthError,
    InvalidMasterKeyError,
    authorization_token,
    build_string_to_sign,
    compute_signature,
    format_http_date,
)

DATE = "Thu, 27 Apr 2017 00:51:12 GMT"


def expected_signature(key: str, text: str) -> str:
    digest = hmac.new(base64.b64decode(key), text.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


class TestStringToSign:
    """Test the canonical string."""

    def test_lowercases_every_line(self):
        text = build_string_to_sign("GET", "dbs", "dbs/ToDoList", DATE)
        assert text == "get\ndbs\ndbs/todolist\nthu, 27 apr 2017 00:51:12 gmt\n\n"

    def test_empty_link_for_database_feed(self):
        text = build_string_to_sign("POST", "dbs", "", DATE)
        assert text.split("\n")[:3] == ["post", "dbs", ""]


class TestAuthorizationToken:
    """Test the Authorization header value."""

    def test_token_is_query_escaped(self, master_key):
        token = authorization_token(master_key, "GET", "dbs", "dbs/ToDoList", DATE)

        assert token.startswith("type%3Dmaster%26ver%3D1.0%26sig%3D")
        assert "=" not in token
        assert "&" not in token
        assert "/" not in token

    def test_signature_matches_hmac(self, master_key):
        token = authorization_token(master_key, "GET", "dbs", "dbs/ToDoList", DATE)

        text = "get\ndbs\ndbs/todolist\nthu, 27 apr 2017 00:51:12 gmt\n\n"
        assert unquote_plus(token) == f"type=master&ver=1.0&sig={expected_signature(master_key, text)}"

    def test_signature_depends_on_method(self, master_key):
        get = authorization_token(master_key, "GET", "docs", "dbs/db/colls/c/docs/d", DATE)
        delete = authorization_token(master_key, "DELETE", "docs", "dbs/db/colls/c/docs/d", DATE)
        assert get != delete

    def test_compute_signature_is_base64(self, master_key):
        signature = compute_signature("get\ndbs\n\n" + DATE.lower() + "\n\n", master_key)
        assert len(base64.b64decode(signature)) == 32


class TestMasterKeyValidation:
    """Test key decoding failures."""

    def test_empty_key(self):
        with pytest.raises(InvalidMasterKeyError):
            authorization_token("", "GET", "dbs", "", DATE)

    def test_non_base64_key(self):
        with pytest.raises(InvalidMasterKeyError) as exc_info:
            authorization_token("not base64!!", "GET", "dbs", "", DATE)

        assert isinstance(exc_info.value, AuthError)
        assert exc_info.value.error_code == "InvalidMasterKey"


class TestHttpDate:
    """Test RFC 1123 date formatting."""

    def test_formats_utc(self):
        moment = datetime(2017, 4, 27, 0, 51, 12, tzinfo=timezone.utc)
        assert format_http_date(moment) == DATE

    def test_naive_is_treated_as_utc(self):
        assert format_http_date(datetime(2017, 4, 27, 0, 51, 12)) == DATE

    def test_defaults_to_now(self):
        assert format_http_date().endswith(" GMT")
