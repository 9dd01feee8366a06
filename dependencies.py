"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. The objects themselves are built once in the
app lifespan and kept on app.state.
"""

from __future__ import annotations

from fastapi import Request

from config import AppSettings
from services.challenge_service import ChallengeCoordinator


def get_settings(request: Request) -> AppSettings:
    """Return the AppSettings instance stored on app.state."""
    return request.app.state.settings


def get_coordinator(request: Request) -> ChallengeCoordinator:
    """Return the process-wide ChallengeCoordinator from app.state."""
    return request.app.state.coordinator
