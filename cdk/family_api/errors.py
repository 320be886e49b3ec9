"""
Error handling utilities for the resource graph builder.

Provides structured errors with error codes for configuration problems
found while planning the graph and for permission checks.
"""

from typing import Any, Dict, Optional


class AppError(Exception):
    """
    Application error with error code and message.

    Raised while planning the resource graph; aborts synthesis.
    """

    def __init__(self, error_code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting."""
        return {
            "errorCode": self.error_code,
            "message": self.message,
            **self.details,
        }


class ErrorCode:
    """Standard error codes for the application."""

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"

    # Permission errors
    ACCESS_DENIED = "ACCESS_DENIED"

    # System errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ConfigurationError(AppError):
    """The entity configuration cannot produce a consistent resource graph."""

    def __init__(self, message: str, **details: Any):
        super().__init__(ErrorCode.INVALID_CONFIG, message, details)


class AccessDeniedError(AppError):
    """A scoped credential was used for an action it does not grant."""

    def __init__(self, message: str, **details: Any):
        super().__init__(ErrorCode.ACCESS_DENIED, message, details)


def handle_error(error: Exception) -> Dict[str, Any]:
    """
    Convert exception to standardized error response.

    Args:
        error: Exception to handle

    Returns:
        Error dictionary
    """
    if isinstance(error, AppError):
        return error.to_dict()

    return {
        "errorCode": ErrorCode.INTERNAL_ERROR,
        "message": "An unexpected error occurred.",
    }
