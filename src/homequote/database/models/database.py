"""
Database models for the partner, catalog, question bank and lead tables.
"""
from sqlalchemy import (
    Column,
    String,
    Text,
    Boolean,
    Integer,
    Numeric,
    DateTime,
    ForeignKey,
    Index,
    JSON,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from homequote.database.models.base import BaseModel
from homequote.utils.helpers import new_id

# Tenant uniqueness only applies among active partners
_ACTIVE_ONLY = text("status = 'active'")


class PartnerProfile(BaseModel):
    """
    One row per identity (partner or admin).
    Maps to the 'user_profiles' table. Rows are never deleted; moderation
    moves `status` between active, pending and suspended.
    """
    __tablename__ = "user_profiles"
    __table_args__ = (
        Index(
            "uq_user_profiles_active_subdomain",
            "subdomain",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
        Index(
            "uq_user_profiles_active_custom_domain",
            "custom_domain",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    user_id = Column(String(36), primary_key=True, default=new_id)
    role = Column(String(20), nullable=False, default="partner", index=True)  # admin / partner
    status = Column(String(20), nullable=False, default="pending", index=True)  # active / pending / suspended

    # Company Information
    company_name = Column(String(200), nullable=True)
    contact_person = Column(String(200), nullable=True)
    phone = Column(String(50), nullable=True)
    postcode = Column(String(20), nullable=True)
    address = Column(Text, nullable=True)
    admin_mail = Column(String(255), nullable=True)
    business_description = Column(Text, nullable=True)
    website_url = Column(String(500), nullable=True)

    # Tenancy
    subdomain = Column(String(63), nullable=True, index=True)
    custom_domain = Column(String(255), nullable=True, index=True)
    domain_verified = Column(Boolean, nullable=True)  # None until checked with the hosting provider

    # Branding
    company_color = Column(String(20), nullable=True)
    logo_url = Column(String(500), nullable=True)
    privacy_policy = Column(Text, nullable=True)
    terms_conditions = Column(Text, nullable=True)

    # Untrusted partner snippets, never rendered by the API
    header_code = Column(Text, nullable=True)
    body_code = Column(Text, nullable=True)
    footer_code = Column(Text, nullable=True)

    # Encrypted integration settings ({key: "iv_hex:cipher_hex"})
    smtp_settings = Column(JSON, nullable=True)
    twilio_settings = Column(JSON, nullable=True)


class ServiceCategory(BaseModel):
    """A line of business (boilers, solar, ...) owning questions, fields and add-ons"""
    __tablename__ = "service_categories"

    service_category_id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(200), nullable=False)
    slug = Column(String(200), unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)


class UserCategoryAccess(BaseModel):
    """Partner request for access to a service category"""
    __tablename__ = "user_category_access"
    __table_args__ = (
        UniqueConstraint("user_id", "service_category_id", name="uq_user_category_access"),
    )

    access_id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(String(36), ForeignKey("user_profiles.user_id"), nullable=False, index=True)
    service_category_id = Column(
        String(36), ForeignKey("service_categories.service_category_id"), nullable=False
    )
    status = Column(String(20), nullable=False, default="pending")  # pending / approved / rejected


class CategoryField(BaseModel):
    """Product field definition for a service category"""
    __tablename__ = "category_fields"
    __table_args__ = (
        UniqueConstraint("service_category_id", "key", name="uq_category_fields_category_key"),
    )

    field_id = Column(String(36), primary_key=True, default=new_id)
    service_category_id = Column(
        String(36), ForeignKey("service_categories.service_category_id"), nullable=False, index=True
    )
    name = Column(String(200), nullable=False)
    key = Column(String(100), nullable=False)
    field_type = Column(String(50), nullable=False)
    is_required = Column(Boolean, nullable=False, default=False)
    is_multi = Column(Boolean, nullable=False, default=False)
    display_order = Column(Integer, nullable=False, default=0)
    display_format = Column(String(50), nullable=False, default="default")
    options = Column(JSON, nullable=True)


class Addon(BaseModel):
    """Partner add-on offered alongside a category's products"""
    __tablename__ = "addons"

    addon_id = Column(String(36), primary_key=True, default=new_id)
    partner_id = Column(String(36), ForeignKey("user_profiles.user_id"), nullable=False, index=True)
    service_category_id = Column(
        String(36), ForeignKey("service_categories.service_category_id"), nullable=False, index=True
    )
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=True)
    image_link = Column(String(500), nullable=True)
    allow_multiple = Column(Boolean, nullable=False, default=False)
    max_count = Column(Integer, nullable=True)

    partner = relationship("PartnerProfile", lazy="joined")


class FormQuestion(BaseModel):
    """
    Quote form question for a service category.
    `conditional_display` gates visibility on an answer to a question in an
    earlier step. Questions are soft-deleted so stored answers stay readable.
    """
    __tablename__ = "form_questions"

    question_id = Column(String(36), primary_key=True, default=new_id)
    service_category_id = Column(
        String(36), ForeignKey("service_categories.service_category_id"), nullable=False, index=True
    )
    step_number = Column(Integer, nullable=False)
    display_order_in_step = Column(Integer, nullable=False, default=0)
    question_text = Column(Text, nullable=False)
    is_multiple_choice = Column(Boolean, nullable=False, default=False)
    answer_options = Column(JSON, nullable=True)
    allow_multiple_selections = Column(Boolean, nullable=False, default=False)
    is_required = Column(Boolean, nullable=False, default=True)
    status = Column(String(20), nullable=False, default="active")  # active / inactive
    is_deleted = Column(Boolean, nullable=False, default=False)
    conditional_display = Column(JSON, nullable=True)


class PartnerLead(BaseModel):
    """
    Customer enquiry captured through a partner's quote form.
    Progressively updated through address, enquiry, survey and payment.
    """
    __tablename__ = "partner_leads"

    submission_id = Column(String(36), primary_key=True, default=new_id)
    partner_id = Column(String(36), ForeignKey("user_profiles.user_id"), nullable=True, index=True)
    service_category_id = Column(
        String(36), ForeignKey("service_categories.service_category_id"), nullable=True, index=True
    )

    # Contact Information
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    # Address Information
    postcode = Column(String(20), nullable=True)
    city = Column(String(100), nullable=True)
    address_line_1 = Column(String(255), nullable=True)
    address_line_2 = Column(String(255), nullable=True)
    street_name = Column(String(255), nullable=True)
    street_number = Column(String(50), nullable=True)
    building_name = Column(String(255), nullable=True)
    sub_building = Column(String(255), nullable=True)
    county = Column(String(100), nullable=True)
    country = Column(String(100), nullable=True)
    address_type = Column(String(50), nullable=True)
    formatted_address = Column(Text, nullable=True)

    # Quote documents
    form_answers = Column(JSON, nullable=True)
    product_info = Column(JSON, nullable=True)
    addon_info = Column(JSON, nullable=True)
    bundle_info = Column(JSON, nullable=True)

    # Progress
    progress_step = Column(String(50), nullable=True)
    status = Column(String(50), nullable=False, default="new")
    payment_method = Column(String(50), nullable=True)
    payment_status = Column(String(50), nullable=True)
    last_seen_at = Column(DateTime, nullable=True)


class QuoteSubmission(BaseModel):
    """Generic quote request with answers labelled by question text"""
    __tablename__ = "quote_submissions"

    submission_id = Column(String(36), primary_key=True, default=new_id)
    service_category_id = Column(
        String(36), ForeignKey("service_categories.service_category_id"), nullable=False, index=True
    )
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, index=True)
    phone = Column(String(50), nullable=True)
    city = Column(String(100), nullable=True)
    postcode = Column(String(20), nullable=False)
    ip_address = Column(String(100), nullable=True)
    user_agent = Column(Text, nullable=True)
    referral_source = Column(Text, nullable=True)
    status = Column(String(20), nullable=False, default="new")
    form_answers = Column(JSON, nullable=False)


class CRMIntegration(BaseModel):
    """OAuth integration between a partner and their CRM account"""
    __tablename__ = "crm_integrations"

    integration_id = Column(String(36), primary_key=True, default=new_id)
    partner_id = Column(String(36), ForeignKey("user_profiles.user_id"), unique=True, nullable=False)
    access_token = Column(Text, nullable=False)
    refresh_token = Column(Text, nullable=False)
    token_expires_at = Column(DateTime, nullable=False)
    company_id = Column(String(100), nullable=False)
    location_id = Column(String(100), nullable=True)
    user_type = Column(String(20), nullable=False, default="Company")  # Company / Location
    scope = Column(Text, nullable=False, default="")
    refresh_token_id = Column(String(100), nullable=False, default="")
    user_id = Column(String(100), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
