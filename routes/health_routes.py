"""
Health check endpoint.

GET /health — in-memory counts plus whether real hCaptcha keys are set.
The service has no external stores, so it is healthy whenever it answers.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from config import AppSettings
from dependencies import get_coordinator, get_settings
from schemas.dto.responses.common import HealthResponse
from services.challenge_service import ChallengeCoordinator

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    settings: AppSettings = Depends(get_settings),
    coordinator: ChallengeCoordinator = Depends(get_coordinator),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        hcaptcha_configured=not settings.hcaptcha.is_test_mode,
        **coordinator.stats(),
    )
