"""
Lead service: partner leads through their progress phases, and quote submissions
"""
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from homequote.core.config import settings
from homequote.database.models import PartnerLead, PartnerProfile, QuoteSubmission
from homequote.repositories.catalog_repository import ServiceCategoryRepository
from homequote.repositories.lead_repository import PartnerLeadRepository, QuoteSubmissionRepository
from homequote.repositories.partner_repository import PartnerRepository
from homequote.repositories.question_repository import QuestionRepository
from homequote.schemas.leads import (
    AddressPhase,
    EnquiryPhase,
    LeadPhase,
    OrderSummary,
    PartnerLeadCreate,
    PaymentPhase,
    QuoteSubmissionCreate,
    SurveyPhase,
)
from homequote.services import form_engine
from homequote.services.partner_resolver import resolve_partner
from homequote.utils.exceptions import BadRequestError, NotFoundError
from homequote.utils.helpers import remove_none_values, to_float, to_int, utcnow
from homequote.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_COUNTRY = "United Kingdom"
DEFAULT_ADDRESS_TYPE = "residential"

# Contact columns a survey may overwrite, keyed by SurveyDetails attribute
SURVEY_COLUMNS = ("first_name", "last_name", "email", "phone", "postcode", "notes")

QUOTE_REQUIRED_FIELDS = (
    ("serviceCategory", "service_category"),
    ("firstName", "first_name"),
    ("lastName", "last_name"),
    ("email", "email"),
    ("postcode", "postcode"),
    ("answers", "answers"),
)


def fold_phase(lead: PartnerLead, phase: LeadPhase, now: datetime) -> Dict[str, Any]:
    """
    Column updates that record one progress phase on a lead.

    Every phase sets the progress step and touches `last_seen_at`; phase
    details are merged into the `form_answers` document, keeping what
    earlier phases stored there.
    """
    answers = dict(lead.form_answers or {})
    updates: Dict[str, Any] = {"progress_step": phase.progress_step, "last_seen_at": now}

    if isinstance(phase, AddressPhase):
        address = phase.address
        country = address.country or DEFAULT_COUNTRY
        address_type = address.address_type or DEFAULT_ADDRESS_TYPE
        updates.update(
            city=address.town_or_city or lead.city,
            postcode=address.postcode or lead.postcode,
            address_line_1=address.address_line_1,
            address_line_2=address.address_line_2,
            street_name=address.street_name,
            street_number=address.street_number,
            building_name=address.building_name,
            sub_building=address.sub_building,
            county=address.county,
            country=country,
            address_type=address_type,
            formatted_address=address.formatted_address,
        )
        details = address.model_dump()
        details.update(country=country, address_type=address_type, selected_at=now.isoformat())
        answers["address_details"] = details

    elif isinstance(phase, EnquiryPhase):
        if phase.progress_step == "enquiry_completed":
            updates["status"] = "enquiry_submitted"
            if phase.details is not None:
                answers["enquiry_details"] = phase.details
                answers["enquiry_completed_at"] = now.isoformat()

    elif isinstance(phase, SurveyPhase):
        contact = remove_none_values(phase.details.model_dump())
        updates.update({k: v for k, v in contact.items() if k in SURVEY_COLUMNS})
        answers["survey_details"] = {**contact, "submitted_at": now.isoformat()}

    elif isinstance(phase, PaymentPhase):
        updates.update(payment_method=phase.method, payment_status=phase.status)

    updates["form_answers"] = answers
    return updates


def order_total(product_info: Optional[dict], addon_info: Optional[list], bundle_info: Optional[list]) -> float:
    """Product price plus priced add-on and bundle lines times their quantity"""
    total = 0.0
    product = product_info or {}
    if product.get("price"):
        total += to_float(product["price"])
    for line in list(addon_info or []) + list(bundle_info or []):
        if line.get("price") and line.get("quantity"):
            total += to_float(line["price"]) * to_int(line["quantity"])
    return total


class LeadService:
    """Service for partner leads and quote submissions"""

    def __init__(self, db: Session):
        self.db = db
        self.leads = PartnerLeadRepository(db)
        self.submissions = QuoteSubmissionRepository(db)
        self.questions = QuestionRepository(db)
        self.categories = ServiceCategoryRepository(db)
        self.partners = PartnerRepository(db)

    def get_lead(self, submission_id: Optional[str]) -> PartnerLead:
        if not submission_id:
            raise BadRequestError("Submission ID is required")
        lead = self.leads.find_by_id(submission_id)
        if lead is None:
            raise NotFoundError("Lead not found")
        return lead

    def create_partner_lead(self, hostname: Optional[str], data: PartnerLeadCreate) -> PartnerLead:
        """
        Store the first save of a quote form for the partner serving `hostname`.

        Only answers to visible questions are kept, and they must pass the
        form's validation.

        Raises:
            NotFoundError: If the host identifies no partner or the category is unknown
            BadRequestError: If the answers fail validation
        """
        partner = resolve_partner(hostname, self.partners, settings.tenancy.reserved_subdomains)
        if partner is None:
            raise NotFoundError("Partner not found")
        if self.categories.find_by_id(data.service_category_id) is None:
            raise NotFoundError("Service category not found")

        questions = self.questions.find_for_category(data.service_category_id)
        errors = form_engine.validate_answers(questions, data.answers)
        if errors:
            raise BadRequestError("; ".join(f"{e.question_id}: {e.message}" for e in errors))

        visible_ids = {q.question_id for q in form_engine.visible_questions(questions, data.answers)}
        answers = {qid: answer for qid, answer in data.answers.items() if qid in visible_ids}

        now = utcnow()
        lead = self.leads.create(
            partner_id=partner.user_id,
            service_category_id=data.service_category_id,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone=data.phone,
            postcode=data.postcode,
            notes=data.notes,
            form_answers={
                "answers": answers,
                "questions": form_engine.answers_by_text(questions, answers),
            },
            product_info=data.product_info,
            addon_info=data.addon_info,
            bundle_info=data.bundle_info,
            progress_step="quote",
            status="new",
            last_seen_at=now,
        )
        logger.info(
            f"[green]Created lead[/green] [cyan]{lead.submission_id}[/cyan] for partner [cyan]{partner.user_id}[/cyan]"
        )
        return lead

    def record_phase(self, submission_id: Optional[str], phase: LeadPhase) -> PartnerLead:
        """Fold one phase into the stored lead"""
        lead = self.get_lead(submission_id)
        updates = fold_phase(lead, phase, utcnow())
        lead = self.leads.update(lead, **updates)
        logger.debug(f"[dim]Lead {lead.submission_id} moved to[/dim] {lead.progress_step}")
        return lead

    def order_summary(self, submission_id: str) -> OrderSummary:
        """Lead priced for the order confirmation page"""
        lead = self.get_lead(submission_id)
        product = lead.product_info or {}
        addons = lead.addon_info or []
        bundles = lead.bundle_info or []

        partner = self.db.get(PartnerProfile, lead.partner_id) if lead.partner_id else None
        category = self.categories.find_by_id(lead.service_category_id) if lead.service_category_id else None

        return OrderSummary(
            submission_id=lead.submission_id,
            product_name=product.get("name") or "Boiler Installation",
            product_price=to_float(product.get("price")),
            addons=[
                {
                    "title": a.get("title") or "Unknown Addon",
                    "quantity": to_int(a.get("quantity")) or 1,
                    "price": to_float(a.get("price")),
                }
                for a in addons
            ],
            bundles=[
                {
                    "title": b.get("title") or "Unknown Bundle",
                    "quantity": to_int(b.get("quantity")) or 1,
                    "unit_price": to_float(b.get("price")),
                }
                for b in bundles
            ],
            total_amount=order_total(product, addons, bundles),
            customer_details={
                "first_name": lead.first_name or "",
                "last_name": lead.last_name or "",
                "email": lead.email or "",
                "phone": lead.phone or "",
                "postcode": lead.postcode or "",
                "notes": lead.notes or "",
            },
            payment_method=lead.payment_method or "unknown",
            payment_status=lead.payment_status or "pending",
            progress_step=lead.progress_step or "checkout",
            created_at=lead.created_at,
            partner_info={
                "company_name": partner.company_name if partner else None,
                "company_color": partner.company_color if partner else None,
            },
            service_category=category.name if category else None,
        )

    def create_quote_submission(
        self,
        data: QuoteSubmissionCreate,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        referral_source: Optional[str] = None,
    ) -> QuoteSubmission:
        """
        Store a generic quote request with answers labelled by question text.

        Raises:
            BadRequestError: Naming the first missing required field
        """
        for label, attr in QUOTE_REQUIRED_FIELDS:
            value = getattr(data, attr)
            if value is None or value == "":
                raise BadRequestError(f"Missing required field: {label}")

        questions = self.questions.find_texts(list(data.answers.keys()))
        submission = self.submissions.create(
            service_category_id=data.service_category,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            phone=data.phone or None,
            city=data.city or None,
            postcode=data.postcode,
            ip_address=ip_address,
            user_agent=user_agent,
            referral_source=referral_source,
            status="new",
            form_answers=form_engine.answers_by_text(questions, data.answers),
        )
        logger.info(f"[green]Quote submission stored[/green] [cyan]{submission.submission_id}[/cyan]")
        return submission
