"""
Response DTOs for the CAPTCHA endpoints and the push channel.

CreateChallengeResponse — POST /api/captcha/challenge
ChallengeResultResponse — GET /api/captcha/wait/{id}, GET /api/captcha/verify/{id}
SolveChallengeResponse  — POST /api/captcha/solve/{id}
SessionResponse         — GET /api/session
ChallengePushMessage    — server→browser WebSocket frame

Field names match what the launchpad frontend and the Rust worker parse.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


class CreateChallengeResponse(BaseModel):
    challenge_id: str


class ChallengeResultResponse(BaseModel):
    status: Literal["solved", "timeout", "pending"]
    verified: bool


class SolveChallengeResponse(BaseModel):
    verified: bool


class SessionResponse(BaseModel):
    session_id: str
    site_key: str
    captcha_type: str = "hcaptcha"


class ChallengePushMessage(BaseModel):
    """``captcha_challenge`` frame pushed to the browser of the session."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["captcha_challenge"] = "captcha_challenge"
    challenge_id: str
    buyer: Optional[str] = None
    amount: str  # display units, 4 decimals
    amount_yocto: Optional[Union[str, int, float]] = None
    transaction_hash: str
    captcha_type: str = "hcaptcha"
    site_key: str
