"""
Hosted auth service client (authorization code exchange)
"""
import httpx
from typing import Any, Dict, Optional

from homequote.core.config import settings
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


class AuthClient:
    """Client for the hosted auth service that issues session tokens"""

    def __init__(self):
        self.base_url = settings.auth.base_url
        self.api_key = settings.auth.api_key
        self.timeout = settings.auth.timeout

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        return headers

    async def exchange_code(self, code: str, code_verifier: Optional[str] = None) -> Dict[str, Any]:
        """
        Exchange an authorization code for a session.

        Returns:
            Session payload with `access_token`, `expires_in` and `user`

        Raises:
            ExternalServiceError: If the service is unreachable, rejects the code
                or returns no access token
        """
        url = f"{self.base_url.rstrip('/')}/token"
        body = {"auth_code": code}
        if code_verifier:
            body["code_verifier"] = code_verifier

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url,
                    params={"grant_type": "pkce"},
                    json=body,
                    headers=self._get_headers(),
                )
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ Auth service unreachable:[/red] {e}")
            raise ExternalServiceError(f"Auth service unreachable: {e}") from e

        if response.status_code >= 400:
            logger.warning(f"[yellow]Auth code exchange failed:[/yellow] {response.status_code}")
            raise ExternalServiceError("Auth code exchange failed", status_code=response.status_code)

        session = response.json()
        if not session.get("access_token"):
            raise ExternalServiceError("Auth code exchange returned no access token")
        return session
