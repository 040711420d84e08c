"""
Signed session tokens.

Tokens are stateless JWTs carrying the admin's id, email, name
and role. The server keeps no session table, so a token cannot
be revoked before it expires.
"""

from datetime import datetime, timedelta
from typing import Any, Dict

from jose import JWTError, jwt

from donation_tracker.config import get_settings


class InvalidTokenError(Exception):
    """Token is malformed, expired or carries a bad signature."""


def create_access_token(claims: Dict[str, Any], expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    to_encode = dict(claims)
    expire = datetime.utcnow() + (
        expires_delta or timedelta(hours=settings.JWT_EXPIRE_HOURS)
    )
    # "sub" must be a string (RFC 7519)
    to_encode.update({"sub": str(claims["id"]), "exp": expire})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    if not isinstance(payload.get("id"), int):
        raise InvalidTokenError("token has no admin id")
    return payload
