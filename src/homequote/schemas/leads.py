"""
Partner lead and quote submission schemas
"""
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import Field

from homequote.schemas.base import BaseSchema, TimestampSchema


class PartnerLeadCreate(BaseSchema):
    """First save of a quote form, before address and enquiry"""
    service_category_id: str = Field(alias="serviceCategoryId")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    postcode: Optional[str] = None
    notes: Optional[str] = None
    answers: Dict[str, Any] = {}
    product_info: Optional[Dict[str, Any]] = Field(default=None, alias="productInfo")
    addon_info: Optional[List[Dict[str, Any]]] = Field(default=None, alias="addonInfo")
    bundle_info: Optional[List[Dict[str, Any]]] = Field(default=None, alias="bundleInfo")


class PartnerLeadResponse(TimestampSchema):
    submission_id: str
    partner_id: Optional[str] = None
    service_category_id: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    postcode: Optional[str] = None
    city: Optional[str] = None
    notes: Optional[str] = None
    form_answers: Optional[Dict[str, Any]] = None
    product_info: Optional[Dict[str, Any]] = None
    addon_info: Optional[List[Dict[str, Any]]] = None
    bundle_info: Optional[List[Dict[str, Any]]] = None
    progress_step: Optional[str] = None
    status: str
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    last_seen_at: Optional[datetime] = None


class AddressData(BaseSchema):
    """Address chosen from the postcode lookup (or typed in)"""
    address_line_1: Optional[str] = None
    address_line_2: Optional[str] = None
    street_name: Optional[str] = None
    street_number: Optional[str] = None
    building_name: Optional[str] = None
    sub_building: Optional[str] = None
    town_or_city: Optional[str] = None
    county: Optional[str] = None
    postcode: Optional[str] = None
    country: Optional[str] = None
    formatted_address: Optional[str] = None
    address_type: Optional[str] = None


class SurveyDetails(BaseSchema):
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    postcode: Optional[str] = None
    notes: Optional[str] = None


# Lead progress phases, folded into the stored lead one at a time

class AddressPhase(BaseSchema):
    kind: Literal["address"] = "address"
    address: AddressData
    progress_step: str = "enquiry"


class EnquiryPhase(BaseSchema):
    kind: Literal["enquiry"] = "enquiry"
    details: Optional[Dict[str, Any]] = None
    progress_step: str = "enquiry_completed"


class SurveyPhase(BaseSchema):
    kind: Literal["survey"] = "survey"
    details: SurveyDetails
    progress_step: str = "survey"


class PaymentPhase(BaseSchema):
    kind: Literal["payment"] = "payment"
    method: str
    status: str
    progress_step: str = "payment_completed"


LeadPhase = Union[AddressPhase, EnquiryPhase, SurveyPhase, PaymentPhase]


class UpdateAddressRequest(BaseSchema):
    submission_id: Optional[str] = Field(default=None, alias="submissionId")
    address_data: Optional[AddressData] = Field(default=None, alias="addressData")
    progress_step: Optional[str] = Field(default=None, alias="progressStep")


class UpdateEnquiryRequest(BaseSchema):
    submission_id: Optional[str] = Field(default=None, alias="submissionId")
    enquiry_details: Optional[Dict[str, Any]] = Field(default=None, alias="enquiryDetails")
    progress_step: Optional[str] = Field(default=None, alias="progressStep")


class UpdatePaymentRequest(BaseSchema):
    submission_id: Optional[str] = Field(default=None, alias="submissionId")
    payment_method: Optional[str] = Field(default=None, alias="paymentMethod")
    payment_status: Optional[str] = Field(default=None, alias="paymentStatus")
    progress_step: Optional[str] = Field(default=None, alias="progressStep")
    survey_details: Optional[SurveyDetails] = Field(default=None, alias="surveyDetails")


class OrderLine(BaseSchema):
    title: str
    quantity: int
    price: float


class BundleLine(BaseSchema):
    title: str
    quantity: int
    unit_price: float = Field(serialization_alias="unitPrice")


class CustomerDetails(BaseSchema):
    first_name: str = Field(serialization_alias="firstName")
    last_name: str = Field(serialization_alias="lastName")
    email: str
    phone: str
    postcode: str
    notes: str


class PartnerInfo(BaseSchema):
    company_name: Optional[str] = Field(default=None, serialization_alias="companyName")
    company_color: Optional[str] = Field(default=None, serialization_alias="companyColor")


class OrderSummary(BaseSchema):
    """Lead rendered for the order confirmation page"""
    submission_id: str = Field(serialization_alias="submissionId")
    product_name: str = Field(serialization_alias="productName")
    product_price: float = Field(serialization_alias="productPrice")
    addons: List[OrderLine]
    bundles: List[BundleLine]
    total_amount: float = Field(serialization_alias="totalAmount")
    customer_details: CustomerDetails = Field(serialization_alias="customerDetails")
    payment_method: str = Field(serialization_alias="paymentMethod")
    payment_status: str = Field(serialization_alias="paymentStatus")
    progress_step: str = Field(serialization_alias="progressStep")
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    partner_info: PartnerInfo = Field(serialization_alias="partnerInfo")
    service_category: Optional[str] = Field(default=None, serialization_alias="serviceCategory")


class QuoteSubmissionCreate(BaseSchema):
    """Generic quote request; required values are checked by the service"""
    service_category: Optional[str] = Field(default=None, alias="serviceCategory")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    postcode: Optional[str] = None
    answers: Optional[Dict[str, Any]] = None


class QuoteSubmissionResponse(TimestampSchema):
    submission_id: str
    service_category_id: str
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    city: Optional[str] = None
    postcode: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referral_source: Optional[str] = None
    status: str
    form_answers: List[Dict[str, Any]]
