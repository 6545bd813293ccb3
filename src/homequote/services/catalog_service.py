"""
Catalog service: add-ons, category fields and partner categories
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from homequote.database.models import Addon, CategoryField
from homequote.repositories.catalog_repository import (
    AddonRepository,
    CategoryFieldRepository,
    ServiceCategoryRepository,
)
from homequote.schemas.catalog import CategoryFieldCreate, CategoryFieldUpdate, FieldOrder
from homequote.utils.exceptions import BadRequestError, NotFoundError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)

DUPLICATE_KEY = "A field with this key already exists for this category"


class ReorderError(Exception):
    """One update of a reorder batch failed; earlier updates stay applied"""

    def __init__(self, message: str, applied: int):
        super().__init__(message)
        self.applied = applied


class CatalogService:
    """Service for catalog reads and admin field management"""

    def __init__(self, db: Session):
        self.db = db
        self.categories = ServiceCategoryRepository(db)
        self.fields = CategoryFieldRepository(db)
        self.addons = AddonRepository(db)

    def list_addons(self, category_slug: Optional[str], partner_id: Optional[str] = None) -> List[Addon]:
        """
        Add-ons of the category identified by slug, optionally for one partner.

        Raises:
            BadRequestError: If no slug is given
            NotFoundError: If the slug matches no category
        """
        if not category_slug:
            raise BadRequestError("Category slug is required")
        category = self.categories.find_by_slug(category_slug)
        if category is None:
            raise NotFoundError("Category not found")
        return self.addons.find_for_category(category.service_category_id, partner_id=partner_id)

    def list_fields(self, service_category_id: Optional[str]) -> List[CategoryField]:
        if not service_category_id:
            raise BadRequestError("Category ID is required")
        return self.fields.find_for_category(service_category_id)

    def get_field(self, field_id: str) -> CategoryField:
        field = self.fields.find_by_id(field_id)
        if field is None:
            raise NotFoundError("Field not found")
        return field

    def create_field(self, data: CategoryFieldCreate) -> CategoryField:
        """
        Create a field; the key must be unique within its category.

        Raises:
            BadRequestError: If a required value is missing or the key is taken
        """
        if not (data.service_category_id and data.name and data.key and data.field_type):
            raise BadRequestError("Missing required fields")
        if self.fields.key_exists(data.service_category_id, data.key):
            raise BadRequestError(DUPLICATE_KEY)

        try:
            field = self.fields.create(
                service_category_id=data.service_category_id,
                name=data.name,
                key=data.key,
                field_type=data.field_type,
                is_required=data.is_required,
                is_multi=data.is_multi,
                display_order=data.display_order or 0,
                display_format=data.display_format or "default",
                options=data.options or None,
            )
        except IntegrityError as e:
            # A concurrent insert took the key after the check above
            self.db.rollback()
            logger.warning(f"[yellow]Category field key conflict:[/yellow] {e.orig}")
            raise BadRequestError(DUPLICATE_KEY) from e
        logger.info(f"[green]Created category field[/green] [cyan]{field.key}[/cyan]")
        return field

    def update_field(self, field_id: str, data: CategoryFieldUpdate) -> CategoryField:
        """Update editable attributes; key and field_type never change"""
        field = self.get_field(field_id)
        changes = data.model_dump(exclude_unset=True)
        if not changes.get("display_format"):
            changes.pop("display_format", None)
        for name in ("name", "is_required", "is_multi"):
            if name in changes and changes[name] is None:
                del changes[name]
        return self.fields.update(field, **changes)

    def delete_field(self, field_id: str) -> None:
        field = self.get_field(field_id)
        self.fields.delete(field)
        logger.info(f"[yellow]Deleted category field[/yellow] [cyan]{field_id}[/cyan]")

    def reorder_fields(self, updates: List[FieldOrder]) -> int:
        """
        Apply display order updates one by one, each committed on its own.

        Returns:
            Number of fields updated

        Raises:
            ReorderError: On the first failing update; the ones before it stay applied
        """
        applied = 0
        for update in updates:
            try:
                found = self.fields.set_display_order(update.field_id, update.display_order)
            except SQLAlchemyError as e:
                self.db.rollback()
                raise ReorderError(f"Failed to reorder field {update.field_id}: {e}", applied) from e
            if not found:
                raise ReorderError(f"Field {update.field_id} not found", applied)
            applied += 1
        return applied

    def approved_categories(self, user_id: str) -> List[Dict[str, Any]]:
        """Active categories approved for the partner, each with its fields"""
        categories = self.categories.find_approved_for_partner(user_id)
        fields = self.fields.find_for_categories([c.service_category_id for c in categories])
        by_category: Dict[str, List[CategoryField]] = {}
        for field in fields:
            by_category.setdefault(field.service_category_id, []).append(field)
        return [
            {
                "service_category_id": c.service_category_id,
                "name": c.name,
                "slug": c.slug,
                "description": c.description,
                "is_active": c.is_active,
                "created_at": c.created_at,
                "updated_at": c.updated_at,
                "fields": by_category.get(c.service_category_id, []),
            }
            for c in categories
        ]
