"""
Partner profile service: host resolution, self-service settings and moderation
"""
from typing import Optional

from sqlalchemy.orm import Session

from homequote.core.config import settings
from homequote.database.models import PartnerProfile
from homequote.repositories.partner_repository import PartnerRepository
from homequote.schemas.partners import PartnerSettingsUpdate
from homequote.services.partner_resolver import candidate_subdomain, resolve_partner
from homequote.utils.exceptions import BadRequestError, NotFoundError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


class PartnerService:
    """Service for the user_profiles table"""

    def __init__(self, db: Session):
        self.db = db
        self.partners = PartnerRepository(db)

    def resolve(self, hostname: Optional[str]) -> PartnerProfile:
        """
        Partner serving `hostname`.

        Raises:
            NotFoundError: If the host identifies no active partner
            PartnerConfigurationError: If the host matches several active partners
        """
        partner = resolve_partner(hostname, self.partners, settings.tenancy.reserved_subdomains)
        if partner is None:
            raise NotFoundError("Partner not found")
        return partner

    def update_settings(self, profile: PartnerProfile, data: PartnerSettingsUpdate) -> PartnerProfile:
        """
        Apply a partial settings update to the caller's own profile.

        Raises:
            BadRequestError: If the subdomain is reserved or either host is held
                by another active partner
        """
        changes = data.model_dump(exclude_unset=True)

        if "subdomain" in changes and changes["subdomain"] != profile.subdomain:
            subdomain = changes["subdomain"]
            if subdomain is not None:
                if candidate_subdomain(subdomain, settings.tenancy.reserved_subdomains) != subdomain:
                    raise BadRequestError("This subdomain is not available")
                if self.partners.is_taken_by_other("subdomain", subdomain, profile.user_id):
                    raise BadRequestError("This subdomain is already in use")

        if "custom_domain" in changes and changes["custom_domain"] != profile.custom_domain:
            domain = changes["custom_domain"]
            if domain is not None and self.partners.is_taken_by_other("custom_domain", domain, profile.user_id):
                raise BadRequestError("This domain is already in use")
            # A new domain has not been checked with the hosting provider yet
            changes["domain_verified"] = None

        profile = self.partners.update(profile, **changes)
        logger.info(f"[green]Updated settings for partner[/green] [cyan]{profile.user_id}[/cyan]")
        return profile

    def set_status(self, user_id: str, status: str) -> PartnerProfile:
        """
        Moderate a partner; rows are never deleted.

        Raises:
            NotFoundError: If the partner does not exist
            BadRequestError: If activation would give a host to two active partners
        """
        profile = self.partners.find_by_id(user_id)
        if profile is None or profile.role != "partner":
            raise NotFoundError("Partner not found")
        if status == "active" and profile.status != "active":
            for column in ("subdomain", "custom_domain"):
                value = getattr(profile, column)
                if value and self.partners.is_taken_by_other(column, value, user_id):
                    raise BadRequestError(f"Another active partner already uses this {column.replace('_', ' ')}")
        profile = self.partners.update(profile, status=status)
        logger.info(f"[yellow]Partner {user_id} is now[/yellow] {status}")
        return profile
