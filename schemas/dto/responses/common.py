"""
Common response DTOs shared across multiple endpoints.

ErrorResponse   — standard error shape from AppError.to_dict()
HealthResponse  — GET /health
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error JSON body produced by the AppError exception handler."""

    model_config = ConfigDict(populate_by_name=True)

    error: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str = "ok"
    active_challenges: int = Field(ge=0)
    active_connections: int = Field(ge=0)
    hcaptcha_configured: bool
