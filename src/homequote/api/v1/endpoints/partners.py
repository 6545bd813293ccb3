"""
Partner API endpoints: host resolution, self-service settings and moderation
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from homequote.core.dependencies import get_db, require_admin, require_partner
from homequote.database.models import PartnerProfile
from homequote.schemas.partners import (
    PartnerPublic,
    PartnerSettingsResponse,
    PartnerSettingsUpdate,
    PartnerStatusUpdate,
    SettingsPayload,
)
from homequote.services.partner_service import PartnerService
from homequote.utils.encryption import decrypt_object, encrypt_object
from homequote.utils.exceptions import PartnerConfigurationError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


def request_host(request: Request) -> Optional[str]:
    """Host the request was addressed to, honouring a proxy's forwarded host"""
    return request.headers.get("x-forwarded-host") or request.headers.get("host")


@router.get("/partners/resolve", response_model=PartnerPublic)
async def resolve_partner_for_host(
    request: Request,
    hostname: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """
    Public branding of the partner serving a host.

    Args:
        hostname: Host to resolve; defaults to the request's own host
    """
    try:
        return PartnerService(db).resolve(hostname or request_host(request))
    except HTTPException:
        raise
    except PartnerConfigurationError as e:
        logger.error(f"[bold red]Partner configuration error:[/bold red] {e}")
        raise HTTPException(status_code=500, detail="Partner configuration error")


@router.get("/partner-settings", response_model=PartnerSettingsResponse)
async def get_partner_settings(profile: PartnerProfile = Depends(require_partner)):
    return profile


@router.patch("/partner-settings", response_model=PartnerSettingsResponse)
async def update_partner_settings(
    body: PartnerSettingsUpdate,
    profile: PartnerProfile = Depends(require_partner),
    db: Session = Depends(get_db)
):
    """Update the caller's own profile; a new custom domain starts unverified"""
    try:
        return PartnerService(db).update_settings(profile, body)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error updating partner settings:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to update settings")


@router.patch("/admin/partners/{user_id}/status", response_model=PartnerSettingsResponse,
              dependencies=[Depends(require_admin)])
async def set_partner_status(
    user_id: str,
    body: PartnerStatusUpdate,
    db: Session = Depends(get_db)
):
    """Move a partner between active, pending and suspended"""
    try:
        return PartnerService(db).set_status(user_id, body.status)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error updating partner {user_id} status:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to update partner status")


@router.post("/partner/encrypt-settings", dependencies=[Depends(require_partner)])
async def encrypt_settings(body: SettingsPayload):
    """Encrypt SMTP and SMS settings values for storage"""
    try:
        return {
            "encrypted_smtp": encrypt_object(body.smtp_settings) if body.smtp_settings else {},
            "encrypted_twilio": encrypt_object(body.twilio_settings) if body.twilio_settings else {},
        }
    except Exception as e:
        logger.error(f"[red]Error encrypting settings:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to encrypt settings")


@router.post("/partner/decrypt-settings", dependencies=[Depends(require_partner)])
async def decrypt_settings(body: SettingsPayload):
    """Decrypt stored settings; values that fail to decrypt come back empty"""
    try:
        return {
            "smtp_settings": decrypt_object(body.smtp_settings or {}),
            "twilio_settings": decrypt_object(body.twilio_settings or {}),
        }
    except Exception as e:
        logger.error(f"[red]Error decrypting settings:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to decrypt settings")
