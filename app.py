"""
FastAPI application factory.
create_app() is the single entry point for building the app.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

import sentry_sdk
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppSettings
from errors import register_error_handlers
from infrastructure.captcha.hcaptcha import HCaptchaVerifier
from infrastructure.captcha.protocol import CaptchaVerifier
from infrastructure.http_client import HttpClient
from infrastructure.push.registry import ConnectionRegistry
from routes.captcha_routes import router as captcha_router
from routes.health_routes import router as health_router
from routes.push_routes import router as push_router
from services.challenge_service import ChallengeCoordinator
from services.challenge_store import ChallengeStore
from services.sweeper import ChallengeSweeper
from shared.log_context import setup_logging_middleware
from shared.logging import get_logger, setup_logging

log = get_logger(__name__)


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    verifier: Optional[CaptchaVerifier] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """Create and return a fully configured FastAPI application.

    ``verifier`` and ``clock`` replace the hCaptcha client and the wall clock;
    tests use them to avoid network calls and to simulate elapsed time.
    """
    if settings is None:
        settings = AppSettings()

    setup_logging(
        log_level=settings.logging.log_level,
        log_format=settings.logging.log_format,
        env=settings.env,
    )

    # Initialise Sentry before anything else so it captures startup errors
    if settings.sentry.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry.sentry_dsn,
            send_default_pii=settings.sentry.sentry_send_pii,
            traces_sample_rate=settings.sentry.sentry_traces_sample_rate,
            profiles_sample_rate=settings.sentry.sentry_profile_sample_rate,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # ── Startup ──────────────────────────────────────────────────────────
        http_client: Optional[HttpClient] = None
        captcha_verifier = verifier
        if captcha_verifier is None:
            http_client = HttpClient(timeout=settings.hcaptcha.hcaptcha_timeout_seconds)
            captcha_verifier = HCaptchaVerifier(
                secret=settings.hcaptcha.hcaptcha_secret,
                http_client=http_client,
                verify_url=settings.hcaptcha.hcaptcha_verify_url,
            )

        challenges = settings.challenges
        store = ChallengeStore(clock=clock)
        registry = ConnectionRegistry()
        coordinator = ChallengeCoordinator(
            store,
            registry,
            captcha_verifier,
            site_key=settings.hcaptcha.hcaptcha_site_key,
            challenge_ttl=challenges.challenge_ttl_seconds,
            default_wait_timeout=challenges.default_wait_timeout_seconds,
            max_wait_timeout=challenges.max_wait_timeout_seconds,
            poll_interval=challenges.poll_interval_seconds,
        )
        sweeper = ChallengeSweeper(
            store,
            interval=challenges.sweep_interval_seconds,
            max_age=challenges.sweep_max_age_seconds,
        )

        app.state.settings = settings
        app.state.store = store
        app.state.registry = registry
        app.state.coordinator = coordinator
        app.state.sweeper = sweeper

        sweeper.start()
        log.info(
            "captcha_relay_started",
            port=settings.port,
            hcaptcha_mode="test" if settings.hcaptcha.is_test_mode else "production",
            allowed_origins=settings.allowed_origins,
        )

        yield

        # ── Shutdown ─────────────────────────────────────────────────────────
        await sweeper.stop()
        if http_client is not None:
            await http_client.aclose()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url=settings.docs_url,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    )
    setup_logging_middleware(app)

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(captcha_router)
    app.include_router(push_router)

    return app
