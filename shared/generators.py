"""
Identifier generators: pure, side-effect-free functions.
"""

from __future__ import annotations

import secrets
import uuid


def generate_challenge_id() -> str:
    """Return a fresh random (v4) UUID string for a challenge record."""
    return str(uuid.uuid4())


def generate_session_id(length: int = 24) -> str:
    """Generate an unguessable URL-safe session identifier.

    Args:
        length: Number of random bytes before base64 encoding (default 24).
    """
    return secrets.token_urlsafe(length)
