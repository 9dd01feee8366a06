"""
FastAPI middleware for request logging and context management.

Provides:
- Request ID generation for correlation (also returned as X-Request-ID)
- request_id / method / path bound into structlog contextvars, so every log
  line emitted while handling the request carries them
- Completion logging with status code and duration
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request

from shared.ip_utils import get_client_ip
from shared.logging import get_logger, hash_ip

log = get_logger("captcha_relay.request")


def generate_request_id() -> str:
    """Generate a unique request ID for correlation."""
    return f"req_{uuid.uuid4().hex[:12]}"


def log_request_end(status_code: int, duration_ms: int) -> None:
    """Log the end of a request; level follows the status code."""
    if status_code >= 500:
        log_fn = log.error
    elif status_code >= 400:
        log_fn = log.warning
    else:
        log_fn = log.info

    log_fn("request_completed", status_code=status_code, duration_ms=duration_ms)


def setup_logging_middleware(app: FastAPI) -> None:
    """Register the request logging middleware on ``app``."""

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        start = time.perf_counter()
        request_id = generate_request_id()

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            ip_hash=hash_ip(get_client_ip(request)),
        )
        response = await call_next(request)
        duration_ms = int((time.perf_counter() - start) * 1000)

        log_request_end(response.status_code, duration_ms)
        response.headers["X-Request-ID"] = request_id
        structlog.contextvars.clear_contextvars()
        return response
