"""
Request DTOs for the CAPTCHA challenge endpoints.

Every field is optional at the schema level: a missing ``session_id`` must
surface as ``missing_session_id`` from the coordinator, not as a generic
validation error.
"""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CreateChallengeRequest(BaseModel):
    """Body of POST /api/captcha/challenge, sent by the worker."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    session_id: Optional[str] = None
    buyer: Optional[str] = None
    # yoctoNEAR, usually a decimal string; passed through untouched
    amount: Optional[Union[str, int, float]] = None
    transaction_hash: Optional[str] = None


class SolveChallengeRequest(BaseModel):
    """Body of POST /api/captcha/solve/{challenge_id}, sent by the browser."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    hcaptcha_token: Optional[str] = Field(default=None, max_length=16384)
