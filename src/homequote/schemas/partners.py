"""
Partner profile schemas
"""
from typing import Literal, Optional

from pydantic import field_validator

from homequote.schemas.base import BaseSchema, TimestampSchema
from homequote.utils.helpers import is_host_label, is_hostname


class PartnerPublic(BaseSchema):
    """Branding returned for a resolved host; no contact or integration data"""
    user_id: str
    company_name: Optional[str] = None
    subdomain: Optional[str] = None
    custom_domain: Optional[str] = None
    company_color: Optional[str] = None
    logo_url: Optional[str] = None
    website_url: Optional[str] = None
    business_description: Optional[str] = None
    privacy_policy: Optional[str] = None
    terms_conditions: Optional[str] = None


class PartnerSettingsResponse(PartnerPublic, TimestampSchema):
    """The caller's own profile"""
    role: str
    status: str
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    postcode: Optional[str] = None
    address: Optional[str] = None
    admin_mail: Optional[str] = None
    domain_verified: Optional[bool] = None
    header_code: Optional[str] = None
    body_code: Optional[str] = None
    footer_code: Optional[str] = None


class PartnerSettingsUpdate(BaseSchema):
    """Partial profile update; omitted fields keep their stored values"""
    company_name: Optional[str] = None
    contact_person: Optional[str] = None
    phone: Optional[str] = None
    postcode: Optional[str] = None
    address: Optional[str] = None
    admin_mail: Optional[str] = None
    business_description: Optional[str] = None
    website_url: Optional[str] = None
    company_color: Optional[str] = None
    logo_url: Optional[str] = None
    privacy_policy: Optional[str] = None
    terms_conditions: Optional[str] = None
    header_code: Optional[str] = None
    body_code: Optional[str] = None
    footer_code: Optional[str] = None
    subdomain: Optional[str] = None
    custom_domain: Optional[str] = None

    @field_validator("subdomain", "custom_domain")
    @classmethod
    def lower_host(cls, v):
        if v is None:
            return v
        v = v.strip().lower().rstrip(".")
        return v or None

    @field_validator("subdomain")
    @classmethod
    def single_label(cls, v):
        if v is not None and not is_host_label(v):
            raise ValueError("must be a single label of letters, digits and hyphens")
        return v

    @field_validator("custom_domain")
    @classmethod
    def valid_hostname(cls, v):
        if v is not None and not is_hostname(v):
            raise ValueError("must be a hostname such as quotes.example.co.uk")
        return v


class PartnerStatusUpdate(BaseSchema):
    status: Literal["active", "pending", "suspended"]


class DomainRequest(BaseSchema):
    domain: Optional[str] = None


class DomainVerification(BaseSchema):
    verified: bool
    status: Literal["verified", "pending", "error"]
    message: Optional[str] = None


class SettingsPayload(BaseSchema):
    """Partner SMTP and SMS settings, plain or encrypted"""
    smtp_settings: Optional[dict] = None
    twilio_settings: Optional[dict] = None
