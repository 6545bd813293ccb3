"""
Pydantic models for LeadConnector OAuth responses
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CRMTokenResponse(BaseModel):
    """Token payload returned by the OAuth token and location token endpoints"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: int = 0
    refresh_token: Optional[str] = None
    scope: Optional[str] = None
    refresh_token_id: Optional[str] = Field(default=None, alias="refreshTokenId")
    user_type: Optional[str] = Field(default=None, alias="userType")
    company_id: Optional[str] = Field(default=None, alias="companyId")
    location_id: Optional[str] = Field(default=None, alias="locationId")
    user_id: Optional[str] = Field(default=None, alias="userId")

    @property
    def is_complete(self) -> bool:
        """Has everything needed to store a new integration"""
        return bool(self.access_token and self.refresh_token and self.company_id and self.user_id)
