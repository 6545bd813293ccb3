"""
CRM integration service: OAuth connection and authenticated API access per partner
"""
from datetime import timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from homequote.core.config import settings
from homequote.database.models import CRMIntegration
from homequote.external.crm.client import LeadConnectorClient
from homequote.external.crm.models import CRMTokenResponse
from homequote.repositories.lead_repository import CRMIntegrationRepository
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.helpers import utcnow
from homequote.utils.logging import get_logger

logger = get_logger(__name__)

CALLBACK_PATH = "/auth/crm/callback"


def callback_url(base_url: str) -> str:
    """OAuth redirect URI registered with the marketplace app"""
    return f"{(settings.app_url or base_url).rstrip('/')}{CALLBACK_PATH}"


def expires_at(expires_in: int):
    return utcnow() + timedelta(seconds=expires_in or 0)


class CRMService:
    """Service for the crm_integrations table and the partner's CRM account"""

    def __init__(self, db: Session):
        self.db = db
        self.integrations = CRMIntegrationRepository(db)

    def authorization_url(self, base_url: str, state: Optional[str] = None) -> str:
        return LeadConnectorClient.get_authorization_url(callback_url(base_url), state=state)

    def get_integration(self, partner_id: str) -> Optional[CRMIntegration]:
        return self.integrations.find_active_for_partner(partner_id)

    def save_integration(self, partner_id: str, token: CRMTokenResponse) -> CRMIntegration:
        """
        Upsert the partner's integration from a code exchange.

        Raises:
            ExternalServiceError: If the token lacks required fields
        """
        if not token.is_complete:
            raise ExternalServiceError("Invalid token data: missing required fields")
        integration = self.integrations.upsert(
            partner_id,
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            token_expires_at=expires_at(token.expires_in),
            company_id=token.company_id,
            location_id=token.location_id,
            user_type=token.user_type or "Company",
            scope=token.scope or "",
            refresh_token_id=token.refresh_token_id or "",
            user_id=token.user_id,
            is_active=True,
        )
        logger.info(f"[green]✅ CRM integration saved[/green] for partner [cyan]{partner_id}[/cyan]")
        return integration

    async def connect(self, partner_id: str, code: str, base_url: str) -> CRMIntegration:
        """Complete the OAuth flow: exchange the code and store the integration"""
        token = await LeadConnectorClient.exchange_code(code, callback_url(base_url))
        return self.save_integration(partner_id, token)

    async def get_client(self, partner_id: str, base_url: str) -> Optional[LeadConnectorClient]:
        """
        API client for the partner, or None when no integration is stored.

        An expired token is refreshed and persisted first. A Company token
        with a configured location is exchanged for a Location token; when
        that exchange fails the Company token is used as-is.
        """
        integration = self.get_integration(partner_id)
        if integration is None:
            return None

        client = LeadConnectorClient(
            access_token=integration.access_token,
            refresh_token=integration.refresh_token,
            company_id=integration.company_id,
            location_id=integration.location_id,
            user_type=integration.user_type,
        )

        if utcnow() >= integration.token_expires_at:
            logger.info(f"[yellow]Refreshing expired CRM token[/yellow] for partner [cyan]{partner_id}[/cyan]")
            token = await client.refresh_access_token(callback_url(base_url))
            self.integrations.update(
                integration,
                access_token=token.access_token,
                refresh_token=token.refresh_token,
                token_expires_at=expires_at(token.expires_in),
            )
            return client

        if integration.user_type == "Company" and integration.location_id:
            try:
                token = await client.get_location_token(integration.location_id)
            except ExternalServiceError as e:
                logger.warning(f"[yellow]Location token unavailable, continuing with Company token:[/yellow] {e}")
                return client
            return LeadConnectorClient(
                access_token=token.access_token,
                refresh_token=token.refresh_token,
                company_id=token.company_id or integration.company_id,
                location_id=token.location_id or integration.location_id,
                user_type="Location",
            )
        return client

    def describe(self, integration: Optional[CRMIntegration]) -> Dict[str, Any]:
        """Integration status with tokens reduced to presence flags"""
        if integration is None:
            return {"connected": False}
        return {
            "connected": True,
            "company_id": integration.company_id,
            "location_id": integration.location_id,
            "user_type": integration.user_type,
            "scope": integration.scope,
            "token_expires_at": integration.token_expires_at,
            "is_expired": utcnow() >= integration.token_expires_at,
        }

    async def custom_fields(self, partner_id: str, base_url: str) -> Optional[List[Dict[str, Any]]]:
        client = await self.get_client(partner_id, base_url)
        if client is None:
            return None
        return await client.get_custom_fields()

    async def pipelines(self, partner_id: str, base_url: str) -> Optional[List[Dict[str, Any]]]:
        client = await self.get_client(partner_id, base_url)
        if client is None:
            return None
        return await client.get_pipelines()
