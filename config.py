"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).

ALLOWED_ORIGINS may be given either as a JSON list or as a comma-separated
string (the format the launchpad deployment scripts already use).
"""

from __future__ import annotations

import json
from typing import Annotated, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# hCaptcha's published test credentials: every token passes verification
HCAPTCHA_TEST_SITE_KEY = "10000000-ffff-ffff-ffff-000000000001"
HCAPTCHA_TEST_SECRET = "0x0000000000000000000000000000000000000000"
HCAPTCHA_VERIFY_URL = "https://api.hcaptcha.com/siteverify"

# Record lifetime, poll timeout and sweep period are separate policies
CHALLENGE_TTL_SECONDS = 60.0
DEFAULT_WAIT_TIMEOUT_SECONDS = 60.0
MAX_WAIT_TIMEOUT_SECONDS = 120.0
POLL_INTERVAL_SECONDS = 0.5
SWEEP_INTERVAL_SECONDS = 60.0
SWEEP_MAX_AGE_SECONDS = 60.0


class HCaptchaSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    hcaptcha_site_key: str = HCAPTCHA_TEST_SITE_KEY
    hcaptcha_secret: str = HCAPTCHA_TEST_SECRET
    hcaptcha_verify_url: str = HCAPTCHA_VERIFY_URL
    hcaptcha_timeout_seconds: float = 10.0

    @property
    def is_test_mode(self) -> bool:
        return self.hcaptcha_site_key == HCAPTCHA_TEST_SITE_KEY


class ChallengeSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    challenge_ttl_seconds: float = CHALLENGE_TTL_SECONDS
    default_wait_timeout_seconds: float = DEFAULT_WAIT_TIMEOUT_SECONDS
    max_wait_timeout_seconds: float = MAX_WAIT_TIMEOUT_SECONDS
    poll_interval_seconds: float = POLL_INTERVAL_SECONDS
    sweep_interval_seconds: float = SWEEP_INTERVAL_SECONDS
    sweep_max_age_seconds: float = SWEEP_MAX_AGE_SECONDS


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    env: str = "development"
    app_name: str = "captcha-relay"
    host: str = "0.0.0.0"
    port: int = 3181

    # Origins allowed for HTTP (CORS) and for the push WebSocket
    allowed_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:8000",
        "https://launchpad.nearspace.info",
    ]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Sub-configs (composed via model_validator below)
    hcaptcha: Optional[HCaptchaSettings] = None
    challenges: Optional[ChallengeSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _split_origins(cls, value):
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.hcaptcha is None:
            self.hcaptcha = HCaptchaSettings()
        if self.challenges is None:
            self.challenges = ChallengeSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()
        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    def origin_allowed(self, origin: Optional[str]) -> bool:
        """Requests without an Origin header (curl, the worker) are always allowed."""
        if not origin:
            return True
        return "*" in self.allowed_origins or origin in self.allowed_origins
