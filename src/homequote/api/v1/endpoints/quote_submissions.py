"""
Quote submission API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from homequote.core.dependencies import get_db
from homequote.schemas.leads import QuoteSubmissionCreate, QuoteSubmissionResponse
from homequote.services.lead_service import LeadService
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.post("/quote-submissions", status_code=201)
async def create_quote_submission(
    body: QuoteSubmissionCreate,
    request: Request,
    db: Session = Depends(get_db)
):
    """Store a quote request with the client's address, agent and referrer"""
    try:
        submission = LeadService(db).create_quote_submission(
            body,
            ip_address=request.headers.get("x-forwarded-for") or (request.client.host if request.client else None),
            user_agent=request.headers.get("user-agent"),
            referral_source=request.headers.get("referer"),
        )
        return {"success": True, "data": QuoteSubmissionResponse.model_validate(submission)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error submitting quote:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to submit quote request")
