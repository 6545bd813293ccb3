"""
Main API router
"""
from fastapi import APIRouter

from homequote.api.v1.endpoints import (
    addons,
    category_fields,
    crm,
    domains,
    form_questions,
    partner_leads,
    partners,
    payments,
    postcode,
    quote_submissions,
    service_categories,
)

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(partners.router, tags=["partners"])
api_router.include_router(addons.router, tags=["catalog"])
api_router.include_router(category_fields.router, tags=["catalog"])
api_router.include_router(service_categories.router, tags=["catalog"])
api_router.include_router(form_questions.router, tags=["form-questions"])
api_router.include_router(partner_leads.router, tags=["leads"])
api_router.include_router(quote_submissions.router, tags=["leads"])
api_router.include_router(payments.router, tags=["payments"])
api_router.include_router(postcode.router, tags=["addresses"])
api_router.include_router(domains.router, tags=["domains"])
api_router.include_router(crm.router, tags=["crm"])
