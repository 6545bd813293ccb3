"""
Custom domain attachment and verification with the hosting provider
"""
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from homequote.database.models import PartnerProfile
from homequote.external.domains.client import DomainsClient
from homequote.repositories.partner_repository import PartnerRepository
from homequote.utils.exceptions import BadRequestError, ExternalServiceError, ForbiddenError
from homequote.utils.helpers import is_hostname
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


def verification_from_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Interpret the provider's domain record as verified, pending or error"""
    if record.get("verified") is True or record.get("configured") is True:
        return {"verified": True, "status": "verified"}

    checks = record.get("verification") or []
    if checks:
        check = checks[0]
        if check.get("status") == "VALID":
            return {"verified": True, "status": "verified"}
        if check.get("status") == "PENDING":
            return {"verified": False, "status": "pending"}
        return {"verified": False, "status": "error", "message": check.get("reason") or "Verification failed"}

    if record.get("redirect") or record.get("redirectStatusCode") or record.get("gitBranch"):
        return {"verified": True, "status": "verified"}

    return {
        "verified": False,
        "status": "error",
        "message": "Domain exists but may need DNS configuration. Please check your DNS settings.",
    }


class DomainService:
    """Service for a partner's own custom domain"""

    def __init__(self, db: Session, client: Optional[DomainsClient] = None):
        self.db = db
        self.partners = PartnerRepository(db)
        self.client = client or DomainsClient()

    @staticmethod
    def check_ownership(profile: PartnerProfile, domain: Optional[str]) -> str:
        """
        Raises:
            BadRequestError: If no domain is given or it is not a hostname
            ForbiddenError: If the domain is not the caller's custom domain
        """
        if not domain:
            raise BadRequestError("Domain is required")
        domain = domain.strip().lower().rstrip(".")
        if not is_hostname(domain):
            raise BadRequestError("Invalid domain")
        if not profile.custom_domain or profile.custom_domain != domain:
            raise ForbiddenError("Domain not found or access denied")
        return domain

    async def add_domain(self, profile: PartnerProfile, domain: Optional[str]) -> Dict[str, Any]:
        domain = self.check_ownership(profile, domain)
        status_code, data = await self.client.add_domain(domain)

        if status_code < 400:
            logger.info(f"[green]Domain added to hosting project:[/green] {domain}")
            return {"success": True, "message": "Domain successfully added", "data": data}

        error = data.get("error") or {}
        if error.get("code") == "DOMAIN_ALREADY_EXISTS":
            return {"success": True, "message": "Domain already exists in the hosting project", "data": data}

        logger.error(f"[red]❌ Failed to add domain {domain}:[/red] {error}")
        raise BadRequestError(error.get("message") or "Failed to add domain")

    async def verify_domain(self, profile: PartnerProfile, domain: Optional[str]) -> Dict[str, Any]:
        """Check the domain with the provider and persist the outcome to domain_verified"""
        domain = self.check_ownership(profile, domain)
        status_code, data = await self.client.get_domain(domain)

        if status_code == 404:
            result = {
                "verified": False,
                "status": "error",
                "message": "Domain not found in the hosting project. Please add it first.",
            }
        elif status_code >= 400:
            message = (data.get("error") or {}).get("message") or "Failed to check domain status"
            raise ExternalServiceError(message, status_code=status_code, data=data)
        else:
            result = verification_from_record(data)

        # Pending leaves the flag unknown; a definite answer is stored
        verified = None if result["status"] == "pending" else result["verified"]
        self.partners.update(profile, domain_verified=verified)
        logger.info(f"[cyan]Domain {domain} verification:[/cyan] {result['status']}")
        return result
