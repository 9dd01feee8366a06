"""
Structured logging for the captcha relay.

This module sets up structlog with:
- Settings-driven configuration (dev vs production)
- JSON formatting for production, pretty console for development
- IP hashing in production
- Redaction of tokens and secrets (hCaptcha responses, shared secret)

``setup_logging()`` is called once by the app factory; ``get_logger()`` can be
used at import time anywhere, structlog binds lazily.
"""

from __future__ import annotations

import hashlib
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "secret",
    "token",
    "hcaptcha_token",
    "proof_token",
    "authorization",
    "cookie",
}

_SENSITIVE_FRAGMENTS = ("token", "secret", "password")

# Keys the processors themselves add; never redacted
_RESERVED_KEYS = {"level", "event", "timestamp", "logger"}

_hash_ips = False


def get_logger(name: str) -> BoundLogger:
    """
    Get a configured logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("challenge_created", challenge_id="...", session_id="...")
    """
    return structlog.get_logger(name)


def hash_ip(ip_address: Optional[str]) -> Optional[str]:
    """
    Hash an IP address for logging.

    In production returns the first 16 hex chars of its SHA-256; in
    development the address is returned unchanged for easier debugging.
    """
    if ip_address is None:
        return None
    if _hash_ips and ip_address:
        return hashlib.sha256(ip_address.encode()).hexdigest()[:16]
    return ip_address


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format UTC timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact tokens and secrets from logs."""
    for key in list(event_dict.keys()):
        if key in _RESERVED_KEYS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            fragment in lowered for fragment in _SENSITIVE_FRAGMENTS
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def build_processors(log_format: str) -> list[Processor]:
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]
    if log_format == "json":
        return shared_processors + [structlog.processors.JSONRenderer()]
    return shared_processors + [
        structlog.dev.ConsoleRenderer(colors=True, pad_event=15, sort_keys=False)
    ]


def configure_stdlib_logging(log_level: str) -> None:
    """Route stdlib logging to stdout and quiet noisy third-party loggers."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def setup_logging(
    log_level: str = "INFO", log_format: str = "console", env: str = "development"
) -> None:
    """
    Initialize the logging system.

    Production: JSON lines, hashed client IPs.
    Development: colored console output.
    """
    global _hash_ips
    _hash_ips = env == "production"

    configure_stdlib_logging(log_level)
    structlog.configure(
        processors=build_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    get_logger(__name__).info(
        "logging_initialized", env=env, log_level=log_level, log_format=log_format
    )
