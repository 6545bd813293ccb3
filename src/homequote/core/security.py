"""
Session token handling
"""
from datetime import timedelta
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from homequote.core.config import settings
from homequote.utils.helpers import utcnow
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


def decode_session_token(token: str) -> Optional[Dict[str, Any]]:
    """
    Verify a session JWT issued by the hosted auth service.

    Returns:
        The claims, or None when the token is invalid, expired or has no subject
    """
    options = {}
    if not settings.security.audience:
        options["verify_aud"] = False
    try:
        claims = jwt.decode(
            token,
            settings.security.secret_key,
            algorithms=[settings.security.algorithm],
            audience=settings.security.audience,
            options=options,
        )
    except JWTError as e:
        logger.debug(f"[dim]Rejected session token:[/dim] {e}")
        return None
    if not claims.get("sub"):
        return None
    return claims


def create_session_token(user_id: str, expires_in: Optional[int] = None, **claims) -> str:
    """Sign a session token for `user_id` (used by tooling and tests)"""
    expires_in = expires_in or settings.security.session_max_age
    to_encode = {"sub": user_id, "exp": utcnow() + timedelta(seconds=expires_in), **claims}
    if settings.security.audience:
        to_encode.setdefault("aud", settings.security.audience)
    return jwt.encode(to_encode, settings.security.secret_key, algorithm=settings.security.algorithm)
