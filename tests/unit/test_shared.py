"""
Unit tests for the shared/ utility modules.

Covers:
- shared.amounts     (yocto_to_display)
- shared.generators  (generate_challenge_id, generate_session_id)
- shared.ip_utils    (get_client_ip)
- shared.logging     (hash_ip, redact_sensitive_fields)
"""

from __future__ import annotations

import uuid
from unittest.mock import MagicMock

import pytest

import shared.logging as shared_logging
from shared.amounts import yocto_to_display
from shared.generators import generate_challenge_id, generate_session_id
from shared.ip_utils import get_client_ip
from shared.logging import hash_ip, redact_sensitive_fields


# ── amounts ───────────────────────────────────────────────────────────────────


class TestYoctoToDisplay:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            ("1000000000000000000000000", "1.0000"),
            ("1500000000000000000000000", "1.5000"),
            ("123456789000000000000000000", "123.4568"),
            ("100000000000000000000", "0.0001"),
            ("40000000000000000000", "0.0000"),
            (10**24 * 3, "3.0000"),
            ("0", "0.0000"),
        ],
    )
    def test_numeric(self, amount, expected):
        assert yocto_to_display(amount) == expected

    @pytest.mark.parametrize("amount", [None, "", "abc", "1e", "NaN", "Infinity", True])
    def test_missing_or_non_numeric(self, amount):
        assert yocto_to_display(amount) == "0"


# ── generators ────────────────────────────────────────────────────────────────


class TestGenerators:
    def test_challenge_id_is_uuid4(self):
        value = generate_challenge_id()
        assert uuid.UUID(value).version == 4

    def test_challenge_ids_unique(self):
        assert len({generate_challenge_id() for _ in range(100)}) == 100

    def test_session_id_url_safe(self):
        value = generate_session_id()
        assert len(value) >= 24
        assert all(c.isalnum() or c in "-_" for c in value)

    def test_session_ids_unique(self):
        assert generate_session_id() != generate_session_id()


# ── ip_utils ──────────────────────────────────────────────────────────────────


def _conn(headers=None, host="10.0.0.1"):
    conn = MagicMock()
    conn.headers = headers or {}
    conn.client = MagicMock(host=host) if host else None
    return conn


class TestGetClientIp:
    def test_falls_back_to_peer(self):
        assert get_client_ip(_conn()) == "10.0.0.1"

    def test_no_client(self):
        assert get_client_ip(_conn(host=None)) == ""

    def test_forwarded_for_takes_first(self):
        conn = _conn({"X-Forwarded-For": "203.0.113.7, 10.0.0.2"})
        assert get_client_ip(conn) == "203.0.113.7"

    def test_cloudflare_header_wins(self):
        conn = _conn(
            {"CF-Connecting-IP": "198.51.100.1", "X-Forwarded-For": "203.0.113.7"}
        )
        assert get_client_ip(conn) == "198.51.100.1"

    def test_blank_header_is_skipped(self):
        conn = _conn({"X-Forwarded-For": " ", "X-Real-IP": "198.51.100.9"})
        assert get_client_ip(conn) == "198.51.100.9"


# ── logging ───────────────────────────────────────────────────────────────────


class TestHashIp:
    def test_none(self):
        assert hash_ip(None) is None

    def test_passthrough_in_development(self, monkeypatch):
        monkeypatch.setattr(shared_logging, "_hash_ips", False)
        assert hash_ip("203.0.113.7") == "203.0.113.7"

    def test_hashed_in_production(self, monkeypatch):
        monkeypatch.setattr(shared_logging, "_hash_ips", True)
        hashed = hash_ip("203.0.113.7")
        assert hashed != "203.0.113.7"
        assert len(hashed) == 16


class TestRedaction:
    def test_tokens_and_secrets_redacted(self):
        event = {
            "event": "challenge_solved",
            "hcaptcha_token": "P1_abc",
            "secret": "0xdead",
            "challenge_id": "c1",
            "site_key": "public",
        }
        out = redact_sensitive_fields(None, "info", event)
        assert out["hcaptcha_token"] == "***REDACTED***"
        assert out["secret"] == "***REDACTED***"
        assert out["challenge_id"] == "c1"
        assert out["site_key"] == "public"
        assert out["event"] == "challenge_solved"
