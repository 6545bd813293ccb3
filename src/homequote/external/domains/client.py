"""
Vercel project domains API client
"""
import httpx
from typing import Any, Dict, Tuple
from urllib.parse import quote

from homequote.core.config import settings
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


class DomainsClient:
    """Attaches partner custom domains to the hosting project and reads their status"""

    def __init__(self):
        self.base_url = settings.domains.base_url
        self.timeout = settings.domains.timeout
        self.auth_token = settings.domains.auth_token
        self.project_id = settings.domains.project_id

    @property
    def is_configured(self) -> bool:
        return bool(self.auth_token and self.project_id)

    def _url(self, suffix: str = "") -> str:
        if not self.is_configured:
            raise ExternalServiceError("Hosting provider configuration is missing")
        return f"{self.base_url.rstrip('/')}/v9/projects/{self.project_id}/domains{suffix}"

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.auth_token}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _body(response: httpx.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    async def _send(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(method, url, headers=self._get_headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ HTTP error calling hosting provider:[/red] {e}")
            raise ExternalServiceError(f"Hosting provider unreachable: {e}") from e

    async def add_domain(self, domain: str) -> Tuple[int, Dict[str, Any]]:
        """POST the domain to the project; returns (status code, body)"""
        response = await self._send("POST", self._url(), json={"name": domain})
        logger.debug(f"[dim]Add domain {domain}:[/dim] {response.status_code}")
        return response.status_code, self._body(response)

    async def get_domain(self, domain: str) -> Tuple[int, Dict[str, Any]]:
        """GET the project's record for the domain; returns (status code, body)"""
        response = await self._send("GET", self._url(f"/{quote(domain, safe='')}"))
        logger.debug(f"[dim]Domain status {domain}:[/dim] {response.status_code}")
        return response.status_code, self._body(response)
