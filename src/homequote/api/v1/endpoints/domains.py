"""
Custom domain API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from homequote.core.dependencies import get_current_profile, get_db
from homequote.database.models import PartnerProfile
from homequote.schemas.partners import DomainRequest, DomainVerification
from homequote.services.domain_service import DomainService
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/domain")


@router.post("/add")
async def add_domain(
    body: DomainRequest,
    profile: PartnerProfile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """Attach the caller's custom domain to the hosting project"""
    try:
        return await DomainService(db).add_domain(profile, body.domain)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error adding domain:[/red] {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/verify", response_model=DomainVerification, response_model_exclude_none=True)
async def verify_domain(
    body: DomainRequest,
    profile: PartnerProfile = Depends(get_current_profile),
    db: Session = Depends(get_db)
):
    """Check the caller's custom domain and record whether it is verified"""
    try:
        return await DomainService(db).verify_domain(profile, body.domain)
    except HTTPException:
        raise
    except ExternalServiceError as e:
        logger.error(f"[red]Domain status check failed:[/red] {e}")
        if e.status_code is None:
            raise HTTPException(status_code=500, detail=str(e))
        return {"verified": False, "status": "error", "message": str(e)}
    except Exception as e:
        logger.error(f"[red]Error checking domain status:[/red] {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
