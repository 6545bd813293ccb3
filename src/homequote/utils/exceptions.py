"""
Custom exception classes
"""
from typing import Any, Optional

from fastapi import HTTPException, status


class BadRequestError(HTTPException):
    """Exception raised for missing or invalid client input"""
    def __init__(self, detail: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(HTTPException):
    """Exception raised when a requested record does not exist"""
    def __init__(self, detail: str, status_code: int = status.HTTP_404_NOT_FOUND):
        super().__init__(status_code=status_code, detail=detail)


class ForbiddenError(HTTPException):
    """Exception raised when the caller may not act on a resource"""
    def __init__(self, detail: str, status_code: int = status.HTTP_403_FORBIDDEN):
        super().__init__(status_code=status_code, detail=detail)


class CRMAPIError(HTTPException):
    """Exception raised when CRM API call fails"""
    def __init__(self, detail: str, status_code: int = status.HTTP_502_BAD_GATEWAY):
        super().__init__(status_code=status_code, detail=detail)


class DatabaseError(HTTPException):
    """Exception raised for database errors"""
    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class PartnerConfigurationError(Exception):
    """A hostname lookup matched more than one active partner"""


class ConditionalDisplayError(ValueError):
    """A question's conditional display rule is invalid"""


class ExternalServiceError(Exception):
    """
    Raised by outbound API clients when a third-party call fails.
    Carries the upstream status code and parsed body when available.
    """
    def __init__(self, message: str, status_code: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.data = data
