"""
LeadConnector (GoHighLevel) REST API client
"""
import httpx
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from homequote.core.config import settings
from homequote.external.crm.models import CRMTokenResponse
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


class LeadConnectorClient:
    """
    Client for the LeadConnector API on behalf of one partner integration.
    Handles the OAuth token endpoints and authenticated REST requests.
    """

    def __init__(
        self,
        access_token: Optional[str] = None,
        refresh_token: Optional[str] = None,
        company_id: Optional[str] = None,
        location_id: Optional[str] = None,
        user_type: str = "Company",
    ):
        self.base_url = settings.crm.base_url
        self.timeout = settings.crm.timeout
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.company_id = company_id
        self.location_id = location_id
        self.user_type = user_type

    def _get_headers(self) -> Dict[str, str]:
        """Bearer token plus the pinned API version"""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Version": settings.crm.api_version,
        }

    @staticmethod
    def _require_credentials() -> None:
        if not settings.crm.client_id or not settings.crm.client_secret:
            raise ExternalServiceError("crm.client_id and crm.client_secret must be configured")

    @staticmethod
    def get_authorization_url(redirect_uri: str, state: Optional[str] = None) -> str:
        """Marketplace URL the partner is sent to for consent"""
        if not settings.crm.client_id:
            raise ExternalServiceError("crm.client_id is not configured")
        params = {
            "client_id": settings.crm.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(settings.crm.scopes),
        }
        if state:
            params["state"] = state
        return f"{settings.crm.auth_url}?{urlencode(params)}"

    @staticmethod
    async def _post_token(data: Dict[str, str]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=settings.crm.timeout) as client:
                response = await client.post(
                    settings.crm.token_url,
                    data=data,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ CRM token endpoint unreachable:[/red] {e}")
            raise ExternalServiceError(f"Token request failed: {e}") from e
        if response.status_code >= 400:
            logger.error(
                f"[red]❌ CRM token request failed:[/red] "
                f"[yellow]{response.status_code}[/yellow] - {response.text}"
            )
            raise ExternalServiceError(
                f"Token request failed: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )
        return response.json()

    @classmethod
    async def exchange_code(cls, code: str, redirect_uri: str) -> CRMTokenResponse:
        """
        Exchange an authorization code for a Company-level token.

        Raises:
            ExternalServiceError: If the exchange fails or the response lacks
                the access token, refresh token, company id or user id
        """
        cls._require_credentials()
        payload = await cls._post_token({
            "client_id": settings.crm.client_id,
            "client_secret": settings.crm.client_secret,
            "grant_type": "authorization_code",
            "code": code,
            "user_type": "Company",
            "redirect_uri": redirect_uri,
        })
        token = CRMTokenResponse.model_validate(payload)
        if not token.is_complete:
            logger.error("[red]❌ Invalid CRM token response: missing required fields[/red]")
            raise ExternalServiceError("Invalid token response: missing required fields")
        logger.info(f"[green]✅ CRM code exchanged[/green] for company [cyan]{token.company_id}[/cyan]")
        return token

    async def refresh_access_token(self, redirect_uri: str) -> CRMTokenResponse:
        """Trade the refresh token for a new token pair and keep it on the client"""
        self._require_credentials()
        payload = await self._post_token({
            "client_id": settings.crm.client_id,
            "client_secret": settings.crm.client_secret,
            "grant_type": "refresh_token",
            "refresh_token": self.refresh_token or "",
            "user_type": self.user_type,
            "redirect_uri": redirect_uri,
        })
        token = CRMTokenResponse.model_validate(payload)
        if not token.access_token or not token.refresh_token:
            raise ExternalServiceError("Invalid refresh token response: missing required fields")
        self.access_token = token.access_token
        self.refresh_token = token.refresh_token
        return token

    async def request(
        self,
        method: str,
        endpoint: str,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Authenticated request against the REST API.

        Raises:
            ExternalServiceError: On a transport failure or any non-2xx response,
                carrying the parsed body when there is one
        """
        url = f"{self.base_url.rstrip('/')}/{endpoint.lstrip('/')}"
        logger.debug(f"[cyan]CRM request:[/cyan] {method} {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(method, url, headers=self._get_headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ HTTP error calling CRM API:[/red] {e}")
            raise ExternalServiceError(f"CRM API unreachable: {e}") from e

        logger.debug(f"[dim]Response status:[/dim] {response.status_code}")
        if response.status_code >= 400:
            try:
                data = response.json()
            except ValueError:
                data = {"message": response.text}
            logger.error(
                f"[red]❌ CRM API error:[/red] [yellow]{response.status_code}[/yellow] - {response.text}"
            )
            raise ExternalServiceError(
                f"CRM API Error: {response.status_code} - {response.text}",
                status_code=response.status_code,
                data=data,
            )
        return response.json()

    async def get_location_token(self, location_id: str) -> CRMTokenResponse:
        """Exchange the Company token for a token scoped to one location"""
        payload = await self.request(
            "POST",
            "/oauth/locationToken",
            json={"companyId": self.company_id, "locationId": location_id},
        )
        return CRMTokenResponse.model_validate(payload)

    def _scoped_to_location(self) -> bool:
        return self.user_type == "Location" and bool(self.location_id)

    async def get_pipelines(self) -> List[Dict[str, Any]]:
        """Opportunity pipelines with their stages"""
        params = {"locationId": self.location_id} if self._scoped_to_location() else None
        response = await self.request("GET", "/opportunities/pipelines", params=params)
        return response.get("pipelines") or response.get("data") or []

    async def get_custom_fields(self) -> List[Dict[str, Any]]:
        """Custom fields, from the location endpoint when scoped to a location"""
        if self._scoped_to_location():
            try:
                response = await self.request("GET", f"/locations/{self.location_id}/customFields")
                return response.get("customFields") or []
            except ExternalServiceError as e:
                logger.warning(f"[yellow]Location custom fields unavailable, trying account fields:[/yellow] {e}")
        response = await self.request("GET", "/custom-fields")
        return response.get("customFields") or []
