"""
Base schema classes
"""
from pydantic import BaseModel as PydanticBaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class BaseSchema(PydanticBaseModel):
    """Base schema with common configuration"""

    model_config = ConfigDict(
        from_attributes=True,  # Build responses straight from ORM rows
        populate_by_name=True,
    )


class TimestampSchema(BaseSchema):
    """Schema with timestamp fields"""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ErrorResponse(BaseSchema):
    """Body of every error response"""
    error: str


class SuccessResponse(BaseSchema):
    """Acknowledgement for writes that return no record"""
    success: bool = True
