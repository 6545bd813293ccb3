"""
Postcode lookup API endpoint
"""
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from homequote.schemas.payments import PostcodeLookupResponse
from homequote.services.postcode_service import lookup_postcode
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/postcode-lookup", response_model=PostcodeLookupResponse, response_model_exclude_none=True)
async def postcode_lookup(postcode: Optional[str] = Query(None)):
    """UK addresses for a postcode"""
    try:
        return await lookup_postcode(postcode)
    except HTTPException:
        raise
    except ExternalServiceError as e:
        logger.error(f"[red]Postcode lookup failed:[/red] {e}")
        raise HTTPException(status_code=e.status_code or 500, detail=str(e))
    except Exception as e:
        logger.error(f"[red]Error in postcode lookup:[/red] {e}")
        raise HTTPException(status_code=500, detail="An unexpected error occurred during postcode lookup")
