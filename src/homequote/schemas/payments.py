"""
Payment, finance, postcode and CRM schemas
"""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from homequote.schemas.base import BaseSchema


class PaymentIntentRequest(BaseSchema):
    amount: Optional[float] = None
    currency: Optional[str] = None
    secret_key: Optional[str] = Field(default=None, alias="secretKey")


class PaymentIntentResponse(BaseSchema):
    client_secret: Optional[str] = Field(serialization_alias="clientSecret")


class KandaRequest(BaseSchema):
    payload: Any = None
    enterprise_id: Optional[str] = Field(default=None, alias="enterpriseId")


class Address(BaseSchema):
    """Normalized UK address from the postcode lookup"""
    address_line_1: str
    address_line_2: Optional[str] = None
    street_name: Optional[str] = None
    street_number: Optional[str] = None
    building_name: Optional[str] = None
    sub_building: Optional[str] = None
    town_or_city: str
    postcode: Optional[str] = None
    formatted_address: Optional[str] = None
    country: str = "United Kingdom"


class PostcodeLookupResponse(BaseSchema):
    addresses: List[Address]
    success: bool
    message: Optional[str] = None


class CRMIntegrationResponse(BaseSchema):
    """Stored integration with tokens reduced to presence flags"""
    connected: bool
    company_id: Optional[str] = None
    location_id: Optional[str] = None
    user_type: Optional[str] = None
    scope: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    is_expired: bool = False
