"""
Partner lead API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from homequote.api.v1.endpoints.partners import request_host
from homequote.core.dependencies import get_db
from homequote.schemas.leads import (
    AddressPhase,
    EnquiryPhase,
    OrderSummary,
    PartnerLeadCreate,
    PartnerLeadResponse,
    PaymentPhase,
    SurveyPhase,
    UpdateAddressRequest,
    UpdateEnquiryRequest,
    UpdatePaymentRequest,
)
from homequote.services.lead_service import LeadService
from homequote.utils.exceptions import BadRequestError, PartnerConfigurationError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/partner-leads")


def _require_submission_id(submission_id):
    if not submission_id:
        raise BadRequestError("Submission ID is required")


@router.post("", response_model=PartnerLeadResponse, status_code=201)
async def create_partner_lead(
    body: PartnerLeadCreate,
    request: Request,
    db: Session = Depends(get_db)
):
    """Start a lead for the partner serving the request's host"""
    try:
        return LeadService(db).create_partner_lead(request_host(request), body)
    except HTTPException:
        raise
    except PartnerConfigurationError as e:
        logger.error(f"[bold red]Partner configuration error:[/bold red] {e}")
        raise HTTPException(status_code=500, detail="Partner configuration error")
    except Exception as e:
        logger.error(f"[red]Error creating partner lead:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to create lead")


@router.put("/update-address")
async def update_address(body: UpdateAddressRequest, db: Session = Depends(get_db)):
    """Record the chosen address (columns and form_answers.address_details)"""
    _require_submission_id(body.submission_id)
    if body.address_data is None:
        raise BadRequestError("Address data is required")
    try:
        phase = AddressPhase(address=body.address_data, progress_step=body.progress_step or "enquiry")
        lead = LeadService(db).record_phase(body.submission_id, phase)
        return {
            "success": True,
            "data": {
                "submission_id": lead.submission_id,
                "address_saved": True,
                "progress_step": lead.progress_step,
            },
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error updating lead address:[/red] {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.put("/update-enquiry")
async def update_enquiry(body: UpdateEnquiryRequest, db: Session = Depends(get_db)):
    """Record enquiry progress; completion stores the details and marks the lead submitted"""
    if not body.submission_id:
        raise BadRequestError("Missing submissionId")
    try:
        phase = EnquiryPhase(
            details=body.enquiry_details,
            progress_step=body.progress_step or "enquiry_completed",
        )
        lead = LeadService(db).record_phase(body.submission_id, phase)
        return {"success": True, "data": PartnerLeadResponse.model_validate(lead)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error updating lead enquiry:[/red] {e}")
        raise HTTPException(status_code=500, detail="Failed to update partner leads")


@router.put("/update-payment")
async def update_payment(body: UpdatePaymentRequest, db: Session = Depends(get_db)):
    """Record survey contact details, or otherwise the payment method and status"""
    _require_submission_id(body.submission_id)
    if body.survey_details is not None:
        phase = SurveyPhase(details=body.survey_details, progress_step=body.progress_step or "survey")
    else:
        if not body.payment_method:
            raise BadRequestError("Payment method is required")
        if not body.payment_status:
            raise BadRequestError("Payment status is required")
        phase = PaymentPhase(
            method=body.payment_method,
            status=body.payment_status,
            progress_step=body.progress_step or "payment_completed",
        )
    try:
        lead = LeadService(db).record_phase(body.submission_id, phase)
        return {"success": True, "data": PartnerLeadResponse.model_validate(lead)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error updating lead payment:[/red] {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{submission_id}", response_model=OrderSummary)
async def get_partner_lead(submission_id: str, db: Session = Depends(get_db)):
    """Order summary of a lead with its computed total"""
    try:
        summary = LeadService(db).order_summary(submission_id)
        logger.debug(
            f"[dim]Order summary {submission_id}:[/dim] total={summary.total_amount} "
            f"addons={len(summary.addons)} bundles={len(summary.bundles)}"
        )
        return summary
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"[red]Error fetching partner lead {submission_id}:[/red] {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
