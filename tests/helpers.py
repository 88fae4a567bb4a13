"""Test helpers shared across modules."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from skillforge.config import get_settings

# 09:00 in Jerusalem
NOW = datetime(2026, 3, 10, 7, 0, tzinfo=timezone.utc)


def make_token(user_id: str, *, expires_in: timedelta = timedelta(hours=1), **claims: object) -> str:
    """Sign an access token the way the platform's auth service does."""
    settings = get_settings()
    payload = {
        "sub": user_id,
        "iss": settings.jwt_issuer,
        "exp": datetime.now(timezone.utc) + expires_in,
        "type": "access",
        **claims,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
