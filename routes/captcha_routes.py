"""
CAPTCHA challenge endpoints.

POST /api/captcha/challenge         — worker creates a challenge for a session
GET  /api/captcha/wait/{id}         — worker long-polls for the outcome
GET  /api/captcha/verify/{id}       — worker's one-shot status check
POST /api/captcha/solve/{id}        — browser submits the hCaptcha token
GET  /api/session                   — browser obtains a session id + site key
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from config import AppSettings
from dependencies import get_coordinator, get_settings
from schemas.dto.requests.captcha import CreateChallengeRequest, SolveChallengeRequest
from schemas.dto.responses.captcha import (
    ChallengeResultResponse,
    CreateChallengeResponse,
    SessionResponse,
    SolveChallengeResponse,
)
from services.challenge_service import CAPTCHA_TYPE, ChallengeCoordinator
from shared.generators import generate_session_id
from shared.ip_utils import get_client_ip

router = APIRouter(tags=["captcha"])


@router.post("/api/captcha/challenge", response_model=CreateChallengeResponse)
async def create_challenge(
    body: Optional[CreateChallengeRequest] = None,
    coordinator: ChallengeCoordinator = Depends(get_coordinator),
) -> CreateChallengeResponse:
    body = body or CreateChallengeRequest()
    challenge_id = await coordinator.create_challenge(
        body.session_id,
        subject=body.buyer,
        amount=body.amount,
        transaction_reference=body.transaction_hash,
    )
    return CreateChallengeResponse(challenge_id=challenge_id)


@router.get("/api/captcha/wait/{challenge_id}", response_model=ChallengeResultResponse)
async def wait_for_result(
    challenge_id: str,
    request: Request,
    timeout: Optional[float] = Query(default=None),
    coordinator: ChallengeCoordinator = Depends(get_coordinator),
) -> ChallengeResultResponse:
    result = await coordinator.wait_for_result(
        challenge_id, timeout, is_disconnected=request.is_disconnected
    )
    return ChallengeResultResponse(**result.to_dict())


@router.get("/api/captcha/verify/{challenge_id}", response_model=ChallengeResultResponse)
async def check_result(
    challenge_id: str,
    coordinator: ChallengeCoordinator = Depends(get_coordinator),
) -> ChallengeResultResponse:
    result = coordinator.check_result(challenge_id)
    return ChallengeResultResponse(**result.to_dict())


@router.post("/api/captcha/solve/{challenge_id}", response_model=SolveChallengeResponse)
async def solve_challenge(
    challenge_id: str,
    request: Request,
    body: Optional[SolveChallengeRequest] = None,
    coordinator: ChallengeCoordinator = Depends(get_coordinator),
) -> SolveChallengeResponse:
    token = body.hcaptcha_token if body else None
    verified = await coordinator.submit_solution(
        challenge_id, token, remote_ip=get_client_ip(request) or None
    )
    return SolveChallengeResponse(verified=verified)


@router.get("/api/session", response_model=SessionResponse)
async def new_session(settings: AppSettings = Depends(get_settings)) -> SessionResponse:
    return SessionResponse(
        session_id=generate_session_id(),
        site_key=settings.hcaptcha.hcaptcha_site_key,
        captcha_type=CAPTCHA_TYPE,
    )
