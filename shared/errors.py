"""
Shared error handling for the map locations service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from .logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ServiceException(Exception):
    """Base exception for service errors."""

    status_code: int = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )
