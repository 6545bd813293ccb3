"""
OAuth callback endpoints (mounted outside the API prefix)
"""
from typing import Optional
from urllib.parse import quote

import httpx
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from homequote.core.config import settings
from homequote.core.dependencies import get_db, get_optional_user
from homequote.core.security import decode_session_token
from homequote.database.models import PartnerProfile
from homequote.external.auth.client import AuthClient
from homequote.services.auth_service import HOME, post_sign_in_path
from homequote.services.crm_service import CRMService
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()

CODE_VERIFIER_COOKIE = "code_verifier"


def _origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _app_url(request: Request) -> str:
    return (settings.app_url or _origin(request)).rstrip("/")


@router.get("/callback")
async def auth_callback(
    request: Request,
    code: Optional[str] = Query(None),
    redirect_to: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Exchange a sign-in code for a session cookie and send the user on.

    An explicit relative `redirect_to` wins; otherwise the landing page
    follows the profile's role and status. Without a code, or when the
    exchange fails, the user goes to the home page.
    """
    origin = _origin(request)
    if not code:
        return RedirectResponse(f"{origin}{HOME}", status_code=302)

    try:
        session = await AuthClient().exchange_code(code, request.cookies.get(CODE_VERIFIER_COOKIE))
    except (ExternalServiceError, httpx.HTTPError) as e:
        logger.warning(f"[yellow]Sign-in code exchange failed:[/yellow] {e}")
        return RedirectResponse(f"{origin}{HOME}", status_code=302)

    access_token = session["access_token"]
    user_id = (session.get("user") or {}).get("id")
    if not user_id:
        claims = decode_session_token(access_token)
        user_id = claims["sub"] if claims else None
    if not user_id:
        return RedirectResponse(f"{origin}{HOME}", status_code=302)

    profile = db.get(PartnerProfile, user_id)
    target = post_sign_in_path(profile, redirect_to)
    logger.info(f"[green]Signed in[/green] [cyan]{user_id}[/cyan] -> {target}")

    response = RedirectResponse(f"{origin}{target}", status_code=302)
    response.set_cookie(
        settings.security.session_cookie,
        access_token,
        max_age=session.get("expires_in") or settings.security.session_max_age,
        httponly=True,
        secure=request.url.scheme == "https",
        samesite="lax",
    )
    response.delete_cookie(CODE_VERIFIER_COOKIE)
    return response


@router.get("/crm/callback")
async def crm_callback(
    request: Request,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    user_id: Optional[str] = Depends(get_optional_user),
    db: Session = Depends(get_db)
):
    """Finish connecting the signed-in partner's CRM account and return to settings"""
    base = _app_url(request)
    settings_url = f"{base}/partner/settings"

    if error:
        logger.error(f"[red]CRM OAuth error:[/red] {error}")
        return RedirectResponse(f"{settings_url}?ghl_error={quote(error, safe='')}", status_code=302)
    if not code:
        return RedirectResponse(f"{settings_url}?ghl_error=no_code", status_code=302)
    if not user_id:
        return RedirectResponse(f"{base}/sign-in?redirect_to={quote('/partner/settings', safe='')}", status_code=302)

    try:
        await CRMService(db).connect(user_id, code, base)
    except Exception as e:
        logger.error(f"[red]CRM OAuth callback error:[/red] {e}")
        return RedirectResponse(f"{settings_url}?ghl_error={quote(str(e) or 'Unknown error', safe='')}", status_code=302)

    return RedirectResponse(f"{settings_url}?ghl_success=true", status_code=302)
