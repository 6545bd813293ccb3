"""
Service category API endpoints
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from homequote.core.dependencies import get_db, require_partner
from homequote.database.models import PartnerProfile
from homequote.schemas.catalog import ServiceCategoryWithFields
from homequote.services.catalog_service import CatalogService
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/service-categories", response_model=List[ServiceCategoryWithFields])
async def list_partner_categories(
    profile: PartnerProfile = Depends(require_partner),
    db: Session = Depends(get_db)
):
    """Active categories the signed-in partner is approved for, with their fields"""
    try:
        return CatalogService(db).approved_categories(profile.user_id)
    except Exception as e:
        logger.error(f"[red]Error fetching service categories:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch service categories")
