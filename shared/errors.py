"""
Shared error handling for the Audience Rules service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    request_id: Optional[str] = None
    code: str
    error: str
    details: Dict[str, Any] = {}


class RulesServiceException(Exception):
    """Base exception for the rules service."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id,
            code=self.code,
            error=self.message,
            details=self.details
        )


class ValidationError(RulesServiceException):
    """Validation-related errors."""

    status_code = 422

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class NotFoundError(RulesServiceException):
    """A named resource does not exist."""

    status_code = 404

    def __init__(self, kind: str, resource_id: str, message: Optional[str] = None):
        super().__init__(
            f"{kind.upper()}_NOT_FOUND",
            message or f"{kind.title()} not found",
            {f"{kind}_id": resource_id}
        )


class RuleNotFoundError(NotFoundError):
    """Raised when a rule id does not exist in the store."""

    def __init__(self, rule_id: str, message: str = "Rule not found"):
        super().__init__("rule", rule_id, message)


class PersistenceError(RulesServiceException):
    """Rule document could not be written."""

    status_code = 500

    def __init__(self, message: str = "Failed to write rules file", details: Optional[Dict[str, Any]] = None):
        super().__init__("PERSISTENCE_ERROR", message, details)

