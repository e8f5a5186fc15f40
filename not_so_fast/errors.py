"""
Error types for not-so-fast.

``ConfigurationError`` is fatal to construction. ``ExhaustionError`` is the
expected outcome of an async check on an empty bucket; the sync checks return
``False`` instead of raising it.
"""

from typing import Any, Dict, Hashable, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Serializable view of a limiter error."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class LimiterException(Exception):
    """Base exception for the rate limiter."""

    code = "LIMITER_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(code=self.code, message=self.message, details=self.details)


class ConfigurationError(LimiterException):
    """Invalid or missing limiter options."""

    code = "CONFIGURATION_ERROR"

    def __init__(self, message: str = "Invalid or missing options", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ExhaustionError(LimiterException):
    """No tokens left in the namespace bucket for the current window."""

    code = "RATE_LIMIT_ERROR"

    def __init__(self, namespace: Optional[Hashable] = None, message: str = "No tokens available"):
        self.namespace = namespace
        details = {"namespace": str(namespace)} if namespace is not None else None
        super().__init__(message, details)
