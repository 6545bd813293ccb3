"""
Webuild postcode lookup API client
"""
import re
import httpx
from typing import Any, Dict, Optional

from homequote.core.config import settings
from homequote.utils.exceptions import ExternalServiceError
from homequote.utils.logging import get_logger

logger = get_logger(__name__)


def clean_postcode(postcode: str) -> str:
    """Upper-case and keep only letters and digits"""
    return re.sub(r"[^A-Z0-9]", "", postcode.upper())


class PostcodeClient:
    """Client for the UK postcode address search"""

    def __init__(self, api_key: Optional[str] = None):
        self.base_url = settings.postcode.base_url
        self.timeout = settings.postcode.timeout
        self.api_key = api_key or settings.postcode.api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, postcode: str) -> Dict[str, Any]:
        """
        Raw search result for a postcode.

        Raises:
            ExternalServiceError: On a transport failure, or a non-2xx response with the
                upstream status and body
        """
        url = f"{self.base_url.rstrip('/')}/{clean_postcode(postcode)}"
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        logger.debug(f"[cyan]Postcode lookup:[/cyan] {url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"[red]❌ HTTP error calling postcode API:[/red] {e}")
            raise ExternalServiceError("Failed to fetch addresses from external service") from e

        if response.status_code >= 400:
            try:
                data = response.json()
            except ValueError:
                data = {"message": response.text}
            logger.error(f"[red]❌ Postcode API error:[/red] [yellow]{response.status_code}[/yellow] - {data}")
            raise ExternalServiceError(
                "Failed to fetch addresses from external service",
                status_code=response.status_code,
                data=data,
            )
        return response.json()
