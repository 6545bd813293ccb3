"""
Catalog queries: service categories, category fields and add-ons
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from homequote.database.models import Addon, CategoryField, ServiceCategory, UserCategoryAccess
from homequote.repositories.base_repository import BaseRepository


class ServiceCategoryRepository(BaseRepository[ServiceCategory]):
    """Repository for the service_categories table"""

    def __init__(self, db: Session):
        super().__init__(db, ServiceCategory)

    def find_by_slug(self, slug: str) -> Optional[ServiceCategory]:
        return self.db.query(ServiceCategory).filter(ServiceCategory.slug == slug).first()

    def find_approved_for_partner(self, user_id: str) -> List[ServiceCategory]:
        """Active categories the partner has been approved for"""
        return (
            self.db.query(ServiceCategory)
            .join(
                UserCategoryAccess,
                UserCategoryAccess.service_category_id == ServiceCategory.service_category_id,
            )
            .filter(UserCategoryAccess.user_id == user_id)
            .filter(UserCategoryAccess.status == "approved")
            .filter(ServiceCategory.is_active.is_(True))
            .order_by(ServiceCategory.name)
            .all()
        )


class CategoryFieldRepository(BaseRepository[CategoryField]):
    """Repository for the category_fields table"""

    def __init__(self, db: Session):
        super().__init__(db, CategoryField)

    def find_for_category(self, service_category_id: str) -> List[CategoryField]:
        return (
            self.db.query(CategoryField)
            .filter(CategoryField.service_category_id == service_category_id)
            .order_by(CategoryField.display_order)
            .all()
        )

    def find_for_categories(self, service_category_ids: List[str]) -> List[CategoryField]:
        if not service_category_ids:
            return []
        return (
            self.db.query(CategoryField)
            .filter(CategoryField.service_category_id.in_(service_category_ids))
            .order_by(CategoryField.display_order)
            .all()
        )

    def key_exists(self, service_category_id: str, key: str) -> bool:
        return (
            self.db.query(CategoryField.field_id)
            .filter(CategoryField.service_category_id == service_category_id)
            .filter(CategoryField.key == key)
            .first()
            is not None
        )

    def set_display_order(self, field_id: str, display_order: int) -> bool:
        """Commit one field's display order; False when the field does not exist"""
        updated = (
            self.db.query(CategoryField)
            .filter(CategoryField.field_id == field_id)
            .update({CategoryField.display_order: display_order}, synchronize_session=False)
        )
        self.db.commit()
        return updated > 0

    def delete(self, db_obj: CategoryField) -> None:
        self.db.delete(db_obj)
        self.db.commit()


class AddonRepository(BaseRepository[Addon]):
    """Repository for the addons table"""

    def __init__(self, db: Session):
        super().__init__(db, Addon)

    def find_for_category(self, service_category_id: str, partner_id: Optional[str] = None) -> List[Addon]:
        query = self.db.query(Addon).filter(Addon.service_category_id == service_category_id)
        if partner_id:
            query = query.filter(Addon.partner_id == partner_id)
        return query.order_by(Addon.created_at).all()
