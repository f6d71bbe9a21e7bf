"""
Bearer access tokens for signed-in users (HS256 JWT, python-jose).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from character_figure.core.errors import AuthenticationError
from character_figure.server.core.config import settings

ALGORITHM = "HS256"


def create_access_token(
    user_uuid: str,
    email: str,
    expires_minutes: Optional[int] = None,
    *,
    secret: Optional[str] = None,
) -> str:
    minutes = expires_minutes if expires_minutes is not None else settings.auth.token_expire_minutes
    expire = datetime.now(timezone.utc) + timedelta(minutes=minutes)
    claims = {"sub": user_uuid, "email": email, "exp": expire}
    return jwt.encode(claims, secret or settings.auth.secret, algorithm=ALGORITHM)


def decode_access_token(token: str, *, secret: Optional[str] = None) -> Dict[str, Any]:
    """Verify ``token`` and return its claims.

    Raises:
        AuthenticationError: If the token is invalid, expired or has no ``sub``
    """
    try:
        claims = jwt.decode(token, secret or settings.auth.secret, algorithms=[ALGORITHM])
    except JWTError as e:
        raise AuthenticationError() from e
    if not claims.get("sub"):
        raise AuthenticationError()
    return claims
