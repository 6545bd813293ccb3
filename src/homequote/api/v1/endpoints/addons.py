"""
Add-on API endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from homequote.core.dependencies import get_db
from homequote.schemas.catalog import AddonResponse
from homequote.services.catalog_service import CatalogService
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/addons", response_model=List[AddonResponse])
async def list_addons(
    category_slug: Optional[str] = Query(None, alias="categorySlug"),
    partner_id: Optional[str] = Query(None, alias="partnerId"),
    db: Session = Depends(get_db)
):
    """
    Add-ons of a service category with the offering partner's branding.

    Args:
        category_slug: Slug of the service category (required)
        partner_id: Only return this partner's add-ons
        db: Database session
    """
    try:
        return CatalogService(db).list_addons(category_slug, partner_id=partner_id)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error fetching addons:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to fetch addons")
