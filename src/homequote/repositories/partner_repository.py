"""
Partner profile queries used by host resolution, settings and moderation
"""
from typing import Optional

from sqlalchemy.exc import MultipleResultsFound
from sqlalchemy.orm import Session

from homequote.core.config import settings
from homequote.database.models import PartnerProfile
from homequote.repositories.base_repository import BaseRepository
from homequote.utils.exceptions import PartnerConfigurationError


class PartnerRepository(BaseRepository[PartnerProfile]):
    """Repository for the user_profiles table"""

    def __init__(self, db: Session, require_verified_domain: Optional[bool] = None):
        super().__init__(db, PartnerProfile)
        if require_verified_domain is None:
            require_verified_domain = settings.tenancy.require_verified_domain
        self.require_verified_domain = require_verified_domain

    def _one_active(self, query, description: str) -> Optional[PartnerProfile]:
        try:
            return query.filter(PartnerProfile.status == "active").one_or_none()
        except MultipleResultsFound:
            raise PartnerConfigurationError(f"More than one active partner matches {description}")

    def find_active_by_custom_domain(self, domain: str) -> Optional[PartnerProfile]:
        """Active partner bound to `domain`; explicitly unverified domains never match"""
        query = self.db.query(PartnerProfile).filter(PartnerProfile.custom_domain == domain)
        if self.require_verified_domain:
            query = query.filter(PartnerProfile.domain_verified.is_(True))
        else:
            query = query.filter(
                (PartnerProfile.domain_verified.is_(True)) | (PartnerProfile.domain_verified.is_(None))
            )
        return self._one_active(query, f"custom domain '{domain}'")

    def find_active_by_subdomain(self, subdomain: str) -> Optional[PartnerProfile]:
        """Active partner owning the platform subdomain label"""
        query = self.db.query(PartnerProfile).filter(PartnerProfile.subdomain == subdomain)
        return self._one_active(query, f"subdomain '{subdomain}'")

    def is_taken_by_other(self, column: str, value: str, user_id: str) -> bool:
        """Whether another active partner already holds `value` in `column`"""
        attr = getattr(PartnerProfile, column)
        return (
            self.db.query(PartnerProfile.user_id)
            .filter(attr == value)
            .filter(PartnerProfile.status == "active")
            .filter(PartnerProfile.user_id != user_id)
            .first()
            is not None
        )
