"""
Catalog schemas: service categories, category fields and add-ons
"""
from typing import Any, List, Optional

from pydantic import Field

from homequote.schemas.base import BaseSchema, TimestampSchema


class CategoryFieldCreate(BaseSchema):
    """
    Request body for creating a category field.
    Required values are checked by the service so a missing one yields a
    single "Missing required fields" error.
    """
    service_category_id: Optional[str] = None
    name: Optional[str] = None
    key: Optional[str] = None
    field_type: Optional[str] = None
    is_required: bool = False
    is_multi: bool = False
    display_order: Optional[int] = None
    display_format: Optional[str] = None
    options: Optional[Any] = None


class CategoryFieldUpdate(BaseSchema):
    """Editable field attributes; key and field_type are fixed once created"""
    name: Optional[str] = None
    is_required: Optional[bool] = None
    is_multi: Optional[bool] = None
    display_format: Optional[str] = None
    options: Optional[Any] = None


class CategoryFieldResponse(TimestampSchema):
    field_id: str
    service_category_id: str
    name: str
    key: str
    field_type: str
    is_required: bool
    is_multi: bool
    display_order: int
    display_format: str
    options: Optional[Any] = None


class FieldOrder(BaseSchema):
    field_id: str
    display_order: int


class ReorderRequest(BaseSchema):
    """New display positions, applied one by one"""
    updates: List[FieldOrder]


class ServiceCategoryResponse(TimestampSchema):
    service_category_id: str
    name: str
    slug: str
    description: Optional[str] = None
    is_active: bool = True


class ServiceCategoryWithFields(ServiceCategoryResponse):
    fields: List[CategoryFieldResponse] = []


class AddonPartner(BaseSchema):
    """Branding of the partner offering an add-on"""
    company_name: Optional[str] = None
    logo_url: Optional[str] = None


class AddonResponse(TimestampSchema):
    addon_id: str
    partner_id: str
    service_category_id: str
    title: str
    description: Optional[str] = None
    price: Optional[float] = None
    image_link: Optional[str] = None
    allow_multiple: bool = False
    max_count: Optional[int] = Field(default=None, ge=0)
    partner: Optional[AddonPartner] = None
