"""Unit tests for AppSettings and sub-configs."""

import pytest

from config import (
    HCAPTCHA_TEST_SECRET,
    HCAPTCHA_TEST_SITE_KEY,
    AppSettings,
    ChallengeSettings,
    HCaptchaSettings,
)


# ---------------------------------------------------------------------------
# HCaptchaSettings
# ---------------------------------------------------------------------------


class TestHCaptchaSettings:
    def test_defaults_to_test_keys(self, monkeypatch):
        monkeypatch.delenv("HCAPTCHA_SITE_KEY", raising=False)
        monkeypatch.delenv("HCAPTCHA_SECRET", raising=False)
        s = HCaptchaSettings()
        assert s.hcaptcha_site_key == HCAPTCHA_TEST_SITE_KEY
        assert s.hcaptcha_secret == HCAPTCHA_TEST_SECRET
        assert s.is_test_mode is True

    def test_real_keys_leave_test_mode(self, monkeypatch):
        monkeypatch.setenv("HCAPTCHA_SITE_KEY", "real-site-key")
        monkeypatch.setenv("HCAPTCHA_SECRET", "0xreal")
        s = HCaptchaSettings()
        assert s.hcaptcha_secret == "0xreal"
        assert s.is_test_mode is False


# ---------------------------------------------------------------------------
# ChallengeSettings
# ---------------------------------------------------------------------------


class TestChallengeSettings:
    def test_defaults(self):
        s = ChallengeSettings()
        assert s.challenge_ttl_seconds == 60
        assert s.default_wait_timeout_seconds == 60
        assert s.max_wait_timeout_seconds == 120
        assert s.poll_interval_seconds == 0.5
        assert s.sweep_interval_seconds == 60
        assert s.sweep_max_age_seconds == 60

    def test_policies_configure_independently(self, monkeypatch):
        monkeypatch.setenv("CHALLENGE_TTL_SECONDS", "90")
        monkeypatch.setenv("SWEEP_INTERVAL_SECONDS", "15")
        s = ChallengeSettings()
        assert s.challenge_ttl_seconds == 90
        assert s.sweep_interval_seconds == 15
        assert s.sweep_max_age_seconds == 60
        assert s.default_wait_timeout_seconds == 60


# ---------------------------------------------------------------------------
# AppSettings
# ---------------------------------------------------------------------------


class TestAppSettings:
    def test_sub_configs_populated(self):
        s = AppSettings()
        assert s.hcaptcha is not None
        assert s.challenges is not None
        assert s.logging is not None
        assert s.sentry is not None

    def test_default_port(self, monkeypatch):
        monkeypatch.delenv("PORT", raising=False)
        assert AppSettings().port == 3181

    def test_port_from_env(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        assert AppSettings().port == 8080

    def test_default_origins(self, monkeypatch):
        monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)
        assert AppSettings().allowed_origins == [
            "http://localhost:8000",
            "https://launchpad.nearspace.info",
        ]

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("https://a.example,https://b.example", ["https://a.example", "https://b.example"]),
            (" https://a.example , ", ["https://a.example"]),
            ('["https://a.example"]', ["https://a.example"]),
            ("*", ["*"]),
        ],
        ids=["comma", "whitespace", "json", "wildcard"],
    )
    def test_origins_from_env(self, monkeypatch, raw, expected):
        monkeypatch.setenv("ALLOWED_ORIGINS", raw)
        assert AppSettings().allowed_origins == expected

    def test_is_production(self, monkeypatch):
        monkeypatch.setenv("ENV", "production")
        assert AppSettings().is_production is True

    def test_is_not_production_by_default(self, monkeypatch):
        monkeypatch.delenv("ENV", raising=False)
        assert AppSettings().is_production is False


class TestOriginAllowed:
    def test_listed_origin(self):
        s = AppSettings(allowed_origins=["https://a.example"])
        assert s.origin_allowed("https://a.example") is True
        assert s.origin_allowed("https://evil.example") is False

    def test_missing_origin_is_allowed(self):
        s = AppSettings(allowed_origins=["https://a.example"])
        assert s.origin_allowed(None) is True
        assert s.origin_allowed("") is True

    def test_wildcard(self):
        s = AppSettings(allowed_origins=["*"])
        assert s.origin_allowed("https://anything.example") is True
