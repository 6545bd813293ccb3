"""
CRM integration API endpoints
"""
from typing import Any, Dict, List

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from homequote.core.dependencies import get_db, require_partner
from homequote.database.models import PartnerProfile
from homequote.schemas.payments import CRMIntegrationResponse
from homequote.services.crm_service import CRMService
from homequote.utils.exceptions import CRMAPIError, ExternalServiceError, NotFoundError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/ghl")


def _base_url(request: Request) -> str:
    return str(request.base_url)


@router.get("/auth-url")
async def get_auth_url(
    request: Request,
    profile: PartnerProfile = Depends(require_partner),
    db: Session = Depends(get_db)
):
    """Marketplace consent URL; the partner id travels as OAuth state"""
    try:
        return {"authUrl": CRMService(db).authorization_url(_base_url(request), state=profile.user_id)}
    except ExternalServiceError as e:
        logger.error(f"[red]CRM authorization URL unavailable:[/red] {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/integration", response_model=CRMIntegrationResponse, response_model_exclude_none=True)
async def get_integration(
    profile: PartnerProfile = Depends(require_partner),
    db: Session = Depends(get_db)
):
    service = CRMService(db)
    return service.describe(service.get_integration(profile.user_id))


async def _crm_data(kind: str, request: Request, profile: PartnerProfile, db: Session) -> List[Dict[str, Any]]:
    service = CRMService(db)
    try:
        fetch = service.custom_fields if kind == "custom fields" else service.pipelines
        data = await fetch(profile.user_id, _base_url(request))
    except (ExternalServiceError, httpx.HTTPError) as e:
        logger.error(f"[red]Error fetching CRM {kind}:[/red] {e}")
        raise CRMAPIError(f"Failed to fetch {kind} from CRM")
    if data is None:
        raise NotFoundError("CRM integration not found")
    return data


@router.get("/custom-fields")
async def get_custom_fields(
    request: Request,
    profile: PartnerProfile = Depends(require_partner),
    db: Session = Depends(get_db)
):
    return {"customFields": await _crm_data("custom fields", request, profile, db)}


@router.get("/pipelines")
async def get_pipelines(
    request: Request,
    profile: PartnerProfile = Depends(require_partner),
    db: Session = Depends(get_db)
):
    return {"pipelines": await _crm_data("pipelines", request, profile, db)}
