"""
Pydantic schemas for request/response validation
"""
from homequote.schemas.base import (
    BaseSchema,
    TimestampSchema,
    ErrorResponse,
    SuccessResponse,
)
from homequote.schemas.catalog import (
    AddonResponse,
    CategoryFieldCreate,
    CategoryFieldResponse,
    CategoryFieldUpdate,
    ReorderRequest,
    ServiceCategoryWithFields,
)
from homequote.schemas.questions import (
    ConditionalDisplay,
    FormQuestionCreate,
    FormQuestionResponse,
    FormQuestionUpdate,
    StepValidationRequest,
    StepValidationResponse,
    VisibleQuestionsRequest,
    VisibleQuestionsResponse,
)
from homequote.schemas.leads import (
    LeadPhase,
    OrderSummary,
    PartnerLeadCreate,
    PartnerLeadResponse,
    QuoteSubmissionCreate,
    QuoteSubmissionResponse,
)
from homequote.schemas.partners import (
    PartnerPublic,
    PartnerSettingsResponse,
    PartnerSettingsUpdate,
)

__all__ = [
    # Base schemas
    "BaseSchema",
    "TimestampSchema",
    "ErrorResponse",
    "SuccessResponse",
    # Catalog schemas
    "AddonResponse",
    "CategoryFieldCreate",
    "CategoryFieldResponse",
    "CategoryFieldUpdate",
    "ReorderRequest",
    "ServiceCategoryWithFields",
    # Question schemas
    "ConditionalDisplay",
    "FormQuestionCreate",
    "FormQuestionResponse",
    "FormQuestionUpdate",
    "StepValidationRequest",
    "StepValidationResponse",
    "VisibleQuestionsRequest",
    "VisibleQuestionsResponse",
    # Lead schemas
    "LeadPhase",
    "OrderSummary",
    "PartnerLeadCreate",
    "PartnerLeadResponse",
    "QuoteSubmissionCreate",
    "QuoteSubmissionResponse",
    # Partner schemas
    "PartnerPublic",
    "PartnerSettingsResponse",
    "PartnerSettingsUpdate",
]
