"""
Database models module
"""
from homequote.database.models.base import Base
from homequote.database.models.database import (  # Import all models here
    PartnerProfile,
    ServiceCategory,
    UserCategoryAccess,
    CategoryField,
    Addon,
    FormQuestion,
    PartnerLead,
    QuoteSubmission,
    CRMIntegration,
)

__all__ = [
    "Base",
    "PartnerProfile",
    "ServiceCategory",
    "UserCategoryAccess",
    "CategoryField",
    "Addon",
    "FormQuestion",
    "PartnerLead",
    "QuoteSubmission",
    "CRMIntegration",
]
