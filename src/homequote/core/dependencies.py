"""
Shared dependencies for FastAPI routes
"""
from typing import Generator, Optional
from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from homequote.core.config import settings
from homequote.core.security import decode_session_token
from homequote.database.models import PartnerProfile
from homequote.database.session import get_session


def get_db() -> Generator:
    """
    Database session dependency.
    Yields a database session from the pool and ensures it's closed after use.
    """
    db = get_session()
    try:
        yield db
    finally:
        db.close()


def get_session_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie"""
    authorization = request.headers.get("authorization")
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return request.cookies.get(settings.security.session_cookie)


def get_optional_user(request: Request) -> Optional[str]:
    """User id of the signed-in caller, or None"""
    token = get_session_token(request)
    if not token:
        return None
    claims = decode_session_token(token)
    return claims["sub"] if claims else None


def get_current_user(user_id: Optional[str] = Depends(get_optional_user)) -> str:
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authentication required")
    return user_id


def get_current_profile(
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PartnerProfile:
    """Profile row of the signed-in caller"""
    profile = db.get(PartnerProfile, user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Profile not found")
    return profile


def require_admin(profile: PartnerProfile = Depends(get_current_profile)) -> PartnerProfile:
    if profile.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
    return profile


def require_partner(profile: PartnerProfile = Depends(get_current_profile)) -> PartnerProfile:
    if profile.role != "partner":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Partner access required")
    return profile
