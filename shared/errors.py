"""
Shared error handling for the Recipe Collections services.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class CollectionsException(Exception):
    """Base exception for Recipe Collections services."""

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


class ValidationError(CollectionsException):
    """Malformed rule input that cannot be compiled."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ConfigurationError(CollectionsException):
    """Rule configuration rejected by the validator; details carry every problem found."""

    status_code = 422

    def __init__(self, message: str = "Invalid rule configuration", errors: Optional[list] = None):
        super().__init__("CONFIGURATION_ERROR", message, {"errors": list(errors or [])})

    @property
    def errors(self) -> list:
        return self.details["errors"]
