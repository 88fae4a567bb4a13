"""Bearer token verification.

Tokens are issued by the platform's auth service; this API only verifies
them with the shared secret and reads the subject claim.
"""

from __future__ import annotations

from typing import Any

import jwt

from skillforge.config import get_settings


def verify_token(token: str, expected_type: str | None = "access") -> dict[str, Any]:
    """
    Verify and decode a JWT.

    Args:
        token: The encoded JWT string.
        expected_type: Required ``type`` claim, if the issuer sets one.

    Returns:
        Decoded payload dictionary.

    Raises:
        jwt.InvalidTokenError: If the token is invalid, expired, or of the wrong type.
    """
    settings = get_settings()
    try:
        payload: dict[str, Any] = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        msg = "Token has expired"
        raise jwt.InvalidTokenError(msg) from None

    token_type = payload.get("type")
    if expected_type is not None and token_type is not None and token_type != expected_type:
        msg = f"Expected token type '{expected_type}', got '{token_type}'"
        raise jwt.InvalidTokenError(msg)

    return payload
